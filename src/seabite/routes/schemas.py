from marshmallow import Schema, fields, validate

from seabite.models.cart import MAX_UNIT_PRICE

PRODUCT_REF = validate.Length(min=1, max=64)


class AddCartItemSchema(Schema):
    product_ref = fields.Str(required=True, validate=PRODUCT_REF)
    price = fields.Decimal(required=True, validate=validate.Range(min=0, max=MAX_UNIT_PRICE))
    qty = fields.Int(load_default=None, strict=True, validate=validate.Range(min=1, max=999))
    name = fields.Str(load_default=None, validate=validate.Length(max=200))
    image = fields.Str(load_default=None)
    unit = fields.Str(load_default=None, validate=validate.Length(max=16))


class UpdateCartItemSchema(Schema):
    qty = fields.Int(required=True, strict=True, validate=validate.Range(min=0, max=999))


class CartTotalsQuerySchema(Schema):
    coupon = fields.Decimal(load_default=0, validate=validate.Range(min=0, max=100))


class ReverseLookupQuerySchema(Schema):
    lat = fields.Float(required=True, validate=validate.Range(min=-90, max=90))
    lon = fields.Float(required=True, validate=validate.Range(min=-180, max=180))


class SearchLookupQuerySchema(Schema):
    q = fields.Str(required=True, validate=validate.Length(min=1, max=200))

# app/models/product.py
from tortoise import fields, models

class Product(models.Model):
    """
    Catalog product owned by a user, optionally placed in one of the owner's
    collections. image_url mirrors the lowest-position ProductImage (the cover).
    """
    id = fields.IntField(pk=True)
    owner = fields.ForeignKeyField("models.User", related_name="products", on_delete=fields.CASCADE)
    collection = fields.ForeignKeyField(
        "models.Collection",
        related_name="products",
        null=True,
        on_delete=fields.SET_NULL,
    )
    name = fields.CharField(max_length=120)
    description = fields.TextField(default="")
    price = fields.DecimalField(max_digits=12, decimal_places=2)
    image_url = fields.CharField(max_length=512, null=True)  # Cover image
    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        table = "products"


class ProductImage(models.Model):
    id = fields.IntField(pk=True)
    product = fields.ForeignKeyField("models.Product", related_name="images", on_delete=fields.CASCADE)
    image_url = fields.CharField(max_length=512)
    position = fields.IntField(default=0)  # Ordering key; lowest is the cover, uniqueness not enforced
    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "product_images"

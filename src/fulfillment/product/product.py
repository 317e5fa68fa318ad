"""Product catalogue entries, matched to order details by sku at read time."""

from protean import handle
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain
from shared.errors import Conflict

from fulfillment.domain import fulfillment, logger
from fulfillment.utils.transactions import exclusive_unit_of_work


@fulfillment.aggregate
class Product:
    sku = String(required=True, max_length=100)
    name = String(required=True, max_length=255)
    image = String(max_length=500)
    variant = String(max_length=255)
    location = String(max_length=100)
    barcode = String(max_length=100)

    def to_summary(self) -> dict:
        return {
            "sku": self.sku,
            "name": self.name,
            "image": self.image,
            "variant": self.variant,
            "location": self.location,
            "barcode": self.barcode,
        }


@fulfillment.repository(part_of=Product)
class ProductRepository:
    def find_by_sku(self, sku: str) -> Product | None:
        return self._dao.query.filter(sku=sku).all().first

    def by_sku(self, skus: list[str]) -> dict[str, Product]:
        """Map each known sku to its product. Unknown skus are simply absent."""
        if not skus:
            return {}
        products = self._dao.query.filter(sku__in=list(set(skus))).limit(len(set(skus))).all().items
        return {product.sku: product for product in products}


@fulfillment.command(part_of="Product")
class RegisterProduct:
    sku = String(required=True, max_length=100)
    name = String(required=True, max_length=255)
    image = String(max_length=500)
    variant = String(max_length=255)
    location = String(max_length=100)
    barcode = String(max_length=100)
    actor_id = Identifier(required=True)
    actor_roles = Text()


@fulfillment.command_handler(part_of=Product)
class ProductHandler:
    @handle(RegisterProduct)
    def register_product(self, command):
        with exclusive_unit_of_work():
            repo = current_domain.repository_for(Product)
            if repo.find_by_sku(command.sku) is not None:
                raise Conflict(f"A product with sku '{command.sku}' already exists")

            product = Product(
                sku=command.sku,
                name=command.name,
                image=command.image,
                variant=command.variant,
                location=command.location,
                barcode=command.barcode,
            )
            repo.add(product)

        logger.info("Product registered", sku=product.sku, actor_id=str(command.actor_id))
        return str(product.id)

"""
Služby nad Redisem: košíky a blacklist odhlášených tokenů.

Košík žije v Redisu (rychlý, dočasný), do PostgreSQL se zapisuje až objednávka.
Klíče:
- cart:user:<uuid>   košík přihlášeného uživatele
- cart:guest:<token> košík návštěvníka (token posílá klient v hlavičce X-Cart-Id)
"""
import json
import redis
from datetime import datetime, timezone
from core.config import settings

# Připojení k Redisu
redis_client = redis.from_url(settings.REDIS_URL, decode_responses=True)

CART_TTL_SECONDS = 7 * 24 * 60 * 60  # 7 dní
MAX_ITEM_QUANTITY = 99


class CartService:
    """Košíky uložené v Redisu jako JSON {product_id: {...}}"""

    @staticmethod
    def user_cart_id(user_id) -> str:
        return f"user:{user_id}"

    @staticmethod
    def guest_cart_id(token: str) -> str:
        return f"guest:{token}"

    @staticmethod
    def _get_cart_key(cart_id: str) -> str:
        return f"cart:{cart_id}"

    @staticmethod
    def _save(cart_id: str, cart: dict) -> None:
        cart_key = CartService._get_cart_key(cart_id)
        if cart:
            redis_client.setex(cart_key, CART_TTL_SECONDS, json.dumps(cart))
        else:
            redis_client.delete(cart_key)

    @staticmethod
    def get_cart(cart_id: str) -> dict:
        """Načíst košík z Redisu"""
        cart_data = redis_client.get(CartService._get_cart_key(cart_id))
        return json.loads(cart_data) if cart_data else {}

    @staticmethod
    def add_item(cart_id: str, product_id: int, quantity: int = 1) -> dict:
        """Přidat produkt; u existující položky se množství sčítá (max 99)"""
        cart = CartService.get_cart(cart_id)

        product_id_str = str(product_id)
        if product_id_str in cart:
            cart[product_id_str]["quantity"] = min(
                cart[product_id_str]["quantity"] + quantity, MAX_ITEM_QUANTITY
            )
        else:
            cart[product_id_str] = {
                "product_id": product_id,
                "quantity": min(quantity, MAX_ITEM_QUANTITY),
                "added_at": datetime.now(timezone.utc).isoformat()
            }

        CartService._save(cart_id, cart)
        return cart

    @staticmethod
    def update_item_quantity(cart_id: str, product_id: int, quantity: int) -> dict:
        """Nastavit množství; 0 nebo méně položku odebere"""
        cart = CartService.get_cart(cart_id)
        product_id_str = str(product_id)

        if product_id_str in cart:
            if quantity <= 0:
                del cart[product_id_str]
            else:
                cart[product_id_str]["quantity"] = min(quantity, MAX_ITEM_QUANTITY)

        CartService._save(cart_id, cart)
        return cart

    @staticmethod
    def remove_item(cart_id: str, product_id: int) -> dict:
        return CartService.update_item_quantity(cart_id, product_id, 0)

    @staticmethod
    def clear_cart(cart_id: str) -> None:
        redis_client.delete(CartService._get_cart_key(cart_id))

    @staticmethod
    def get_cart_count(cart_id: str) -> int:
        """Celkový počet kusů v košíku"""
        cart = CartService.get_cart(cart_id)
        return sum(item["quantity"] for item in cart.values())

    @staticmethod
    def merge_carts(source_cart_id: str, target_cart_id: str) -> dict:
        """
        Sloučit košík návštěvníka do košíku uživatele (po přihlášení).

        Množství stejných produktů se sčítají, zdrojový košík se smaže.
        """
        source = CartService.get_cart(source_cart_id)
        target = CartService.get_cart(target_cart_id)

        for product_id_str, item in source.items():
            if product_id_str in target:
                target[product_id_str]["quantity"] = min(
                    target[product_id_str]["quantity"] + item["quantity"], MAX_ITEM_QUANTITY
                )
            else:
                target[product_id_str] = item

        CartService._save(target_cart_id, target)
        CartService.clear_cart(source_cart_id)
        return target


class TokenBlacklistService:
    """Odvolané (odhlášené) JWT tokeny podle jti"""

    @staticmethod
    def _get_key(token_jti: str) -> str:
        return f"blacklist:{token_jti}"

    @staticmethod
    def revoke_token(token_jti: str, expires_in_seconds: int) -> None:
        """Zneplatnit token až do jeho přirozené expirace"""
        redis_client.setex(TokenBlacklistService._get_key(token_jti), expires_in_seconds, "1")

    @staticmethod
    def is_token_revoked(token_jti: str) -> bool:
        return redis_client.exists(TokenBlacklistService._get_key(token_jti)) > 0

from cart_pilot.adapters.base import LoginSiteAdapter, SiteAdapter, pick_best_product, score_product
from cart_pilot.adapters.service import ShoppingFlow
from cart_pilot.adapters.views import ProductInfo, ShoppingResult, extract_price

__all__ = [
	'SiteAdapter',
	'LoginSiteAdapter',
	'ShoppingFlow',
	'ProductInfo',
	'ShoppingResult',
	'pick_best_product',
	'score_product',
	'extract_price',
]

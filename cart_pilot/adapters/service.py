from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

from cart_pilot.adapters.base import LoginSiteAdapter, SiteAdapter
from cart_pilot.adapters.views import ShoppingResult
from cart_pilot.intent.parser import IntentParser

if TYPE_CHECKING:
	from cart_pilot.intent.views import ShoppingIntent
	from cart_pilot.storage.service import StorageManager
	from cart_pilot.storage.views import CredentialRecord

logger = logging.getLogger(__name__)

NOT_UNDERSTOOD_MESSAGE = 'Could not understand the request. Please be more specific.'


class ShoppingFlow:
	"""
	Scripted add-to-cart path for stores that have a SiteAdapter.

	The request is parsed by the rule-based IntentParser and only acted on once
	its confidence reaches ``MIN_CONFIDENCE``. The adapter then runs
	login (when the store asks for it), find, select, add and verify. The
	first step that reports failure ends the run with a failed ShoppingResult.
	A verified addition is recorded in storage when one is given.
	"""

	def __init__(
		self,
		adapter: SiteAdapter,
		parser: Optional[IntentParser] = None,
		storage: Optional[StorageManager] = None,
	):
		self.adapter = adapter
		self.parser = parser or IntentParser()
		self.storage = storage

	async def run(
		self,
		request: str,
		credentials: Optional[CredentialRecord] = None,
		hostname: Optional[str] = None,
	) -> ShoppingResult:
		intent = self.parser.parse(request)
		if not self.parser.is_actionable(intent):
			logger.info(f'Intent confidence {intent.confidence} too low for "{request}"')
			return ShoppingResult(success=False, message=NOT_UNDERSTOOD_MESSAGE, site=self.adapter.site_name, intent=intent)

		if credentials is None and self.storage is not None:
			credentials = await self.storage.get_credentials_for_site(hostname or self.adapter.site_name)

		try:
			result = await self._execute(intent, credentials)
		except Exception as e:
			logger.exception(f'{self.adapter.site_name}: automation failed')
			return ShoppingResult(
				success=False,
				message=f'Automation failed: {e}',
				site=self.adapter.site_name,
				intent=intent,
				error=str(e),
			)

		if result.success and result.product is not None and self.storage is not None:
			product = result.product
			await self.storage.add_successful_item(
				site=self.adapter.site_name,
				name=product.name,
				price=product.price,
				image=product.image,
				url=product.url,
				category=product.category,
				original_request=request,
			)
		return result

	async def _execute(self, intent: ShoppingIntent, credentials: Optional[CredentialRecord]) -> ShoppingResult:
		adapter = self.adapter
		site = adapter.site_name
		steps: list[str] = []

		def failed(message: str, **extra) -> ShoppingResult:
			logger.warning(f'{site}: {message}')
			return ShoppingResult(success=False, message=message, site=site, intent=intent, steps=steps, **extra)

		if isinstance(adapter, LoginSiteAdapter) and await adapter.is_login_page():
			steps.append('login')
			if credentials is None or not credentials.username or not credentials.password:
				return failed('Login required. Please provide username and password.', requires_login=True)
			logger.info(f'🔑 {site}: logging in as {credentials.username}')
			if not await adapter.login(credentials.username, credentials.password):
				return failed('Login failed. Please check your credentials.')

		steps.append('find')
		logger.info(f'🔍 {site}: finding products')
		products = await adapter.find_products(intent)
		if not products:
			return failed('Could not find any products matching your request.')

		steps.append('select')
		product = await adapter.select_best_product(products, intent)
		if product is None:
			return failed('Could not select a suitable product.')

		steps.append('add')
		logger.info(f'🛒 {site}: adding "{product.name}" to the cart')
		if not await adapter.add_to_cart(product):
			return failed('Could not add the product to cart.')

		steps.append('verify')
		verified = await adapter.verify_cart_addition(product)
		info = await adapter.get_product_info(product)
		message = 'Successfully added product to cart!' if verified else 'Product may have been added, please check your cart.'
		logger.log(35 if verified else logging.WARNING, f'{site}: {message}')
		return ShoppingResult(success=verified, message=message, site=site, product=info, intent=intent, steps=steps)

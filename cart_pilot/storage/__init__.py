from cart_pilot.storage.service import StorageManager
from cart_pilot.storage.views import AddedItem, ChatEntry, CredentialRecord, StorageStats

__all__ = ['StorageManager', 'AddedItem', 'ChatEntry', 'CredentialRecord', 'StorageStats']

from factory_inventory.models.user import User, AuthAccount, AuthSession
from factory_inventory.models.inventory import InventoryItem

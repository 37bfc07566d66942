"""Wishlist repositories package."""

from modules.wishlist.repositories.django_repository import WishlistDjangoRepository
from modules.wishlist.repositories.interfaces import IWishlistRepository

__all__ = ["IWishlistRepository", "WishlistDjangoRepository"]

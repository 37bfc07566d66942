"""Wishlist URL configuration."""

from __future__ import annotations

from django.urls import path

from modules.wishlist.views import WishlistViewSet

wishlist = WishlistViewSet.as_view({"get": "list", "post": "create", "delete": "clear"})
wishlist_item = WishlistViewSet.as_view({"delete": "destroy"})

urlpatterns = [
    path("wishlist/", wishlist, name="wishlist"),
    path("wishlist/<uuid:product_id>/", wishlist_item, name="wishlist-item"),
]

"""Cart URL configuration."""

from __future__ import annotations

from django.urls import path

from modules.cart.views import CartViewSet

cart = CartViewSet.as_view({"get": "retrieve", "delete": "clear"})
cart_items = CartViewSet.as_view({"post": "add_item"})
cart_item = CartViewSet.as_view({"patch": "update_item", "delete": "remove_item"})
checkout = CartViewSet.as_view({"post": "checkout"})

urlpatterns = [
    path("cart/", cart, name="cart"),
    path("cart/items/", cart_items, name="cart-items"),
    path("cart/items/<uuid:product_id>/", cart_item, name="cart-item"),
    path("cart/checkout/", checkout, name="cart-checkout"),
]

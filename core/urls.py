from django.urls import path
from rest_framework_simplejwt.views import TokenRefreshView

from . import views

urlpatterns = [
	# Auth endpoints
	path("auth/register/", views.UserRegistrationView.as_view(), name="user-register"),
	path("auth/login/", views.login_view, name="user-login"),
	path("auth/refresh/", TokenRefreshView.as_view(), name="token-refresh"),
	# User endpoints
	path("users/", views.UserListView.as_view(), name="user-list"),
	path("users/<int:pk>/", views.UserDetailView.as_view(), name="user-detail"),
	# Category endpoints
	path("categories/", views.CategoryListView.as_view(), name="category-list"),
	path("categories/<int:pk>/", views.CategoryDetailView.as_view(), name="category-detail"),
	# Product endpoints
	path("products/", views.ProductListCreateView.as_view(), name="product-list-create"),
	path("products/<int:pk>/", views.ProductDetailView.as_view(), name="product-detail"),
	# Notification endpoints
	path(
		"notifications/",
		views.NotificationView.as_view(),
		name="notification-list",
	),
	path(
		"notifications/<int:pk>/",
		views.NotificationView.as_view(),
		name="notification-actions",
	),
]

from django.contrib.auth import authenticate
from django.utils import timezone
from rest_framework import exceptions, generics, permissions, status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework_simplejwt.tokens import RefreshToken

from core.enums.product_statuses import ProductStatuses
from trade.services.entity_store import EntityStore

from .models import Category, Notification, Product, User
from .serializers import (
	CategorySerializer,
	NotificationSerializer,
	ProductSerializer,
	UserRegistrationSerializer,
	UserSerializer,
	UserUpdateSerializer,
)


class UserRegistrationView(generics.CreateAPIView):
	queryset = User.objects.all()
	serializer_class = UserRegistrationSerializer
	permission_classes = (permissions.AllowAny,)

	def create(self, request, *args, **kwargs):
		serializer = self.get_serializer(data=request.data)
		serializer.is_valid(raise_exception=True)
		user = serializer.save()
		refresh = RefreshToken.for_user(user)
		return Response(
			{
				"user": UserSerializer(user).data,
				"refresh": str(refresh),
				"access": str(refresh.access_token),
			},
			status=status.HTTP_201_CREATED,
		)


@api_view(["POST"])
@permission_classes([permissions.AllowAny])
def login_view(request):
	username = request.data.get("username")
	password = request.data.get("password")

	if username and password:
		user = authenticate(username=username, password=password)
		if user:
			refresh = RefreshToken.for_user(user)
			user.last_login = timezone.now()
			user.save(update_fields=["last_login"])
			return Response({
				"user": UserSerializer(user).data,
				"refresh": str(refresh),
				"access": str(refresh.access_token),
			})

	return Response({"error": "Invalid credentials"}, status=status.HTTP_401_UNAUTHORIZED)


class UserListView(generics.ListAPIView):
	queryset = User.objects.filter(is_active=True).order_by("id")
	serializer_class = UserSerializer
	filterset_fields = ("username", "location")
	search_fields = ("username", "first_name", "last_name")


class UserDetailView(generics.RetrieveUpdateAPIView):
	queryset = User.objects.all()
	serializer_class = UserSerializer

	def update(self, request, *args, **kwargs):
		instance = self.get_object()

		if instance != request.user and not request.user.is_staff:
			raise exceptions.PermissionDenied("You can only edit your own profile.")

		serializer = UserUpdateSerializer(instance, data=request.data, partial=True)
		serializer.is_valid(raise_exception=True)

		self.perform_update(serializer)

		return Response(UserSerializer(instance).data, status=status.HTTP_200_OK)


class CategoryListView(generics.ListAPIView):
	queryset = Category.objects.filter(is_active=True)
	serializer_class = CategorySerializer
	filterset_fields = ("parent", "slug")
	pagination_class = None


class CategoryDetailView(generics.RetrieveAPIView):
	queryset = Category.objects.all()
	serializer_class = CategorySerializer


class ProductListCreateView(generics.ListCreateAPIView):
	queryset = Product.objects.select_related("owner", "category").prefetch_related("preferred_categories")
	serializer_class = ProductSerializer
	filterset_fields = ("category", "status", "accepts_trade_offers", "owner", "condition")
	search_fields = ("title", "description")
	ordering_fields = ("created_at", "price", "title")

	def perform_create(self, serializer):
		serializer.save(owner=self.request.user)


class ProductDetailView(generics.RetrieveUpdateDestroyAPIView):
	queryset = Product.objects.select_related("owner", "category").prefetch_related("preferred_categories")
	serializer_class = ProductSerializer

	def check_object_permissions(self, request, obj):
		super().check_object_permissions(request, obj)

		if request.method not in permissions.SAFE_METHODS and obj.owner_id != request.user.id:
			raise exceptions.PermissionDenied("Only the owner can change this product.")

	def perform_destroy(self, instance):
		# Offers keep referencing the product, so it is only hidden; a sold product stays sold
		for listed in (ProductStatuses.ACTIVE, ProductStatuses.RESERVED):
			if EntityStore.compare_and_set_product_status(instance.pk, listed, ProductStatuses.INACTIVE):
				return


class NotificationView(generics.ListAPIView, generics.RetrieveUpdateDestroyAPIView):
	queryset = Notification.objects.all()
	serializer_class = NotificationSerializer
	filterset_fields = ("is_read", "event_type", "level", "priority")
	ordering_fields = ("created_at",)

	def get_queryset(self):
		return self.queryset.filter(user=self.request.user).order_by("-created_at")

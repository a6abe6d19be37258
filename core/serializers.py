from typing import Any

from django.db import transaction
from rest_framework import serializers

from core.enums.product_statuses import ProductStatuses
from trade.exceptions import ProductStatusChanged
from trade.services.entity_store import EntityStore

from .models import Category, Notification, Product, User


class UserRegistrationSerializer(serializers.ModelSerializer):
	password = serializers.CharField(
		write_only=True,
		min_length=8,
		help_text="Password must be at least 8 characters long",
	)
	password_confirm = serializers.CharField(write_only=True, help_text="Must match the password field")

	class Meta:
		model = User
		fields = (
			"id",
			"username",
			"email",
			"first_name",
			"last_name",
			"location",
			"phone_country_code",
			"phone_number",
			"password",
			"password_confirm",
		)

	def validate(self, attrs):
		if attrs["password"] != attrs["password_confirm"]:
			raise serializers.ValidationError("Passwords don't match")
		return attrs

	def create(self, validated_data):
		validated_data.pop("password_confirm")
		password = validated_data.pop("password")
		user = User.objects.create_user(**validated_data)
		user.set_password(password)
		user.save()
		return user


class UserUpdateSerializer(serializers.ModelSerializer):
	password = serializers.CharField(
		write_only=True,
		min_length=8,
		required=False,
		help_text="Password must be at least 8 characters long",
	)
	password_confirm = serializers.CharField(
		write_only=True,
		required=False,
		help_text="Must match the password field",
	)

	class Meta:
		model = User
		fields = (
			"id",
			"email",
			"first_name",
			"last_name",
			"location",
			"phone_country_code",
			"phone_number",
			"password",
			"password_confirm",
		)

	def validate(self, attrs):
		if attrs.get("password") != attrs.get("password_confirm"):
			raise serializers.ValidationError("Passwords don't match")
		return attrs

	def update(self, instance, validated_data):
		validated_data.pop("password_confirm", None)
		password = validated_data.pop("password", None)

		for attr, value in validated_data.items():
			setattr(instance, attr, value)

		if password:
			instance.set_password(password)

		instance.save()
		return instance


class UserSerializer(serializers.ModelSerializer):
	active_products = serializers.SerializerMethodField(help_text="Number of active listings of the user")

	class Meta:
		model = User
		fields = (
			"id",
			"username",
			"email",
			"first_name",
			"last_name",
			"location",
			"date_joined",
			"active_products",
		)
		read_only_fields = ["id", "username", "date_joined"]

	def get_active_products(self, obj: User) -> int:
		return obj.products.filter(status=ProductStatuses.ACTIVE).count()


class SimpleUserSerializer(serializers.ModelSerializer):
	class Meta:
		model = User
		fields = ("id", "username", "location")


class CategorySerializer(serializers.ModelSerializer):
	class Meta:
		model = Category
		fields = ("id", "name", "slug", "parent", "is_active")
		read_only_fields = fields


class ProductSerializer(serializers.ModelSerializer):
	owner = SimpleUserSerializer(read_only=True, help_text="Current owner of the product")
	category_name = serializers.CharField(source="category.name", read_only=True)
	preferred_categories = serializers.PrimaryKeyRelatedField(
		many=True,
		required=False,
		queryset=Category.objects.filter(is_active=True),
		help_text="Categories the owner would like to receive in exchange",
	)
	is_tradeable = serializers.BooleanField(read_only=True)

	class Meta:
		model = Product
		fields = (
			"id",
			"owner",
			"title",
			"description",
			"price",
			"category",
			"category_name",
			"condition",
			"location",
			"images",
			"status",
			"accepts_trade_offers",
			"accepts_any_trade",
			"preferred_categories",
			"min_trade_value_percentage",
			"trade_note",
			"is_tradeable",
			"created_at",
			"updated_at",
		)
		read_only_fields = ["id", "owner", "created_at", "updated_at"]

	def validate_status(self, value: str) -> str:
		"""Owners cannot mark a product sold; only an accepted trade does."""  # noqa: DOC201, DOC501
		current = self.instance.status if self.instance else ProductStatuses.ACTIVE

		if value == ProductStatuses.SOLD and current != ProductStatuses.SOLD:
			raise serializers.ValidationError("A product becomes sold when a trade offer for it is accepted.")

		if current == ProductStatuses.SOLD and value != ProductStatuses.SOLD:
			raise serializers.ValidationError("A sold product cannot be relisted.")

		return value

	@transaction.atomic
	def update(self, instance: Product, validated_data: dict[str, Any]) -> Product:
		"""
		Write the edited columns only, and move the status with a compare-and-set.

		The instance may have been read before a trade claimed the product, so its
		``status`` is never written back as part of a plain save.

		Raises:
			ProductStatusChanged: The stored status no longer matches the one the
				edit was based on.
		"""  # noqa: DOC201
		new_status = validated_data.pop("status", None)
		preferred_categories = validated_data.pop("preferred_categories", None)

		for attr, value in validated_data.items():
			setattr(instance, attr, value)

		instance.save(update_fields=[*validated_data, "updated_at"])

		if preferred_categories is not None:
			instance.preferred_categories.set(preferred_categories)

		if new_status is not None and new_status != instance.status:
			if not EntityStore.compare_and_set_product_status(instance.pk, instance.status, new_status):
				raise ProductStatusChanged(field="status")

		instance.refresh_from_db(fields=["status", "updated_at"])
		return instance


class NotificationSerializer(serializers.ModelSerializer):
	class Meta:
		model = Notification
		fields = "__all__"
		read_only_fields = [
			"id",
			"user",
			"event_type",
			"trade_offer_id",
			"message",
			"priority",
			"level",
			"redirect_to",
			"created_at",
			"updated_at",
		]

from django.db import models


class Category(models.Model):
	"""A product category. The taxonomy is managed elsewhere; products only reference it."""

	name = models.CharField(max_length=100)
	slug = models.SlugField(max_length=120, unique=True)
	parent = models.ForeignKey(
		"self",
		on_delete=models.SET_NULL,
		null=True,
		blank=True,
		related_name="subcategories",
	)
	is_active = models.BooleanField(default=True)

	created_at = models.DateTimeField(auto_now_add=True)
	updated_at = models.DateTimeField(auto_now=True)

	class Meta:  # noqa: D106
		ordering = ("name",)
		verbose_name_plural = "Categories"

	def __str__(self) -> str:
		return self.name

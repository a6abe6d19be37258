from typing import Any

from django.db.models import Model
from django.forms.models import model_to_dict


def get_django_model_fields(model: type[Model] | Model, *, exclude_fields: list[str] = list()) -> list[str]:  # noqa: B006, C408
	"""
	Get the field names of a Django model.

	Args:
		model: The Django model class or instance.
		exclude_fields: A list of field names to exclude from the result.

	Returns:
		List[str]: A list of field names for the model.
	"""
	return [field.name for field in model._meta.fields if field.name not in exclude_fields]


def django_obj_to_dict(obj: Model, *, exclude_fields: list[str] = list()) -> dict[str, Any]:  # noqa: B006, C408
	"""
	Convert a Django model object to a dictionary.

	Foreign keys are rendered as their primary keys and non-editable fields
	(``auto_now`` timestamps) are left out, which is what ``model_to_dict`` does.

	Args:
		obj: The Django model object to convert.
		exclude_fields: A list of field names to exclude from the dictionary.

	Returns:
		Dict[str, Any]: The dictionary representation of the Django model object.

	Example:
		>>> django_obj_to_dict(offer, exclude_fields=["message"])
		{'id': 1, 'status': 'pending', 'offered_product': 3, ...}
	"""
	return model_to_dict(
		obj,
		fields=get_django_model_fields(obj, exclude_fields=exclude_fields),
	)


def days_until(moment: Any, now: Any) -> int:  # noqa: ANN401
	"""
	Whole days (rounded up) from ``now`` until ``moment``, never negative.

	Args:
		moment: The future datetime.
		now: The reference datetime.

	Returns:
		int: 0 if ``moment`` has passed, otherwise the ceiling of the remaining days.

	Example:
		>>> days_until(now + timedelta(days=2, hours=1), now)
		3
	"""
	if moment <= now:
		return 0

	seconds = (moment - now).total_seconds()
	return int(-(-seconds // 86400))

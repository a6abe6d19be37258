from django.db import migrations


def data_migration(apps, schema_editor):
	Category = apps.get_model('core', 'Category')

	data = [
		{'name': 'Electronics', 'slug': 'electronics'},
		{'name': 'Books', 'slug': 'books'},
		{'name': 'Sports & Outdoors', 'slug': 'sports-outdoors'},
		{'name': 'Home & Garden', 'slug': 'home-garden'},
		{'name': 'Fashion', 'slug': 'fashion'},
		{'name': 'Toys & Games', 'slug': 'toys-games'},
		{'name': 'Musical Instruments', 'slug': 'musical-instruments'},
		{'name': 'Vehicles', 'slug': 'vehicles'},
	]

	for datum in data:
		Category.objects.update_or_create(slug=datum['slug'], defaults={'name': datum['name']})


class Migration(migrations.Migration):
	dependencies = [
		('core', '0001_initial'),
	]

	operations = [
		migrations.RunPython(data_migration, migrations.RunPython.noop),
	]

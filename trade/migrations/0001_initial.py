import decimal

import django.core.serializers.json
import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models

import trade.models.trade_offer


class Migration(migrations.Migration):
	initial = True

	dependencies = [
		('core', '0001_initial'),
		migrations.swappable_dependency(settings.AUTH_USER_MODEL),
	]

	operations = [
		migrations.CreateModel(
			name='TradeOffer',
			fields=[
				('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
				(
					'additional_cash_offer',
					models.DecimalField(
						decimal_places=2,
						default=decimal.Decimal('0'),
						max_digits=12,
						validators=[django.core.validators.MinValueValidator(decimal.Decimal('0'))],
					),
				),
				('message', models.CharField(blank=True, max_length=500)),
				(
					'response_message',
					models.CharField(
						blank=True,
						help_text='Rejection reason, or the system reason for automatic transitions',
						max_length=500,
					),
				),
				(
					'status',
					models.CharField(
						choices=[
							('pending', 'Pending'),
							('accepted', 'Accepted'),
							('rejected', 'Rejected'),
							('cancelled', 'Cancelled'),
							('completed', 'Completed'),
						],
						default='pending',
						max_length=20,
					),
				),
				('is_counter_offer', models.BooleanField(default=False)),
				(
					'child_offer_ids',
					models.JSONField(
						blank=True,
						default=list,
						help_text='Ids of counter-offers raised against this offer, append-only',
					),
				),
				('meetup_preferred', models.BooleanField(default=False)),
				('meetup_location', models.CharField(blank=True, max_length=255)),
				('shipping_preferred', models.BooleanField(default=False)),
				('shipping_details', models.CharField(blank=True, max_length=255)),
				('additional_notes', models.TextField(blank=True, max_length=1000)),
				('expires_at', models.DateTimeField(default=trade.models.trade_offer.default_expiry)),
				('responded_at', models.DateTimeField(blank=True, null=True)),
				('completed_at', models.DateTimeField(blank=True, null=True)),
				('created_at', models.DateTimeField(auto_now_add=True)),
				('updated_at', models.DateTimeField(auto_now=True)),
				(
					'offered_by',
					models.ForeignKey(
						on_delete=django.db.models.deletion.PROTECT,
						related_name='trade_offers_sent',
						to=settings.AUTH_USER_MODEL,
					),
				),
				(
					'offered_product',
					models.ForeignKey(
						help_text='Product offered by the proposer',
						on_delete=django.db.models.deletion.PROTECT,
						related_name='offers_made',
						to='core.product',
					),
				),
				(
					'parent_offer',
					models.ForeignKey(
						blank=True,
						help_text='The offer this counter-offer answers',
						null=True,
						on_delete=django.db.models.deletion.SET_NULL,
						related_name='counter_offers',
						to='trade.tradeoffer',
					),
				),
				(
					'requested_from',
					models.ForeignKey(
						on_delete=django.db.models.deletion.PROTECT,
						related_name='trade_offers_received',
						to=settings.AUTH_USER_MODEL,
					),
				),
				(
					'requested_product',
					models.ForeignKey(
						help_text='Product requested from the recipient',
						on_delete=django.db.models.deletion.PROTECT,
						related_name='offers_received',
						to='core.product',
					),
				),
			],
			options={
				'ordering': ('-created_at',),
				'indexes': [
					models.Index(fields=['status'], name='offer_status_idx'),
					models.Index(fields=['offered_product', 'status'], name='offer_offered_product_idx'),
					models.Index(fields=['requested_product', 'status'], name='offer_requested_product_idx'),
					models.Index(fields=['offered_by', 'status'], name='offer_offered_by_idx'),
					models.Index(fields=['requested_from', 'status'], name='offer_requested_from_idx'),
					models.Index(fields=['parent_offer'], name='offer_parent_idx'),
					models.Index(fields=['status', 'expires_at'], name='offer_status_expiry_idx'),
				],
			},
		),
		migrations.CreateModel(
			name='TradeOfferHistory',
			fields=[
				('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
				(
					'event_type',
					models.CharField(
						choices=[
							('created', 'Created'),
							('countered', 'Countered'),
							('accepted', 'Accepted'),
							('rejected', 'Rejected'),
							('cancelled', 'Cancelled'),
							('cascade_rejected', 'Cascade Rejected'),
							('completed', 'Completed'),
							('expired', 'Expired'),
						],
						help_text='Type of event that occurred',
						max_length=30,
					),
				),
				('message', models.TextField(blank=True, help_text='Human-readable description of this event')),
				(
					'snapshot',
					models.JSONField(
						blank=True,
						encoder=django.core.serializers.json.DjangoJSONEncoder,
						help_text='JSON snapshot of the trade offer at this point in time',
						null=True,
					),
				),
				('created_at', models.DateTimeField(auto_now_add=True, help_text='When this event occurred')),
				(
					'actor',
					models.ForeignKey(
						blank=True,
						help_text='User who triggered this event (None for system events)',
						null=True,
						on_delete=django.db.models.deletion.SET_NULL,
						related_name='trade_offer_actions',
						to=settings.AUTH_USER_MODEL,
					),
				),
				(
					'trade_offer',
					models.ForeignKey(
						help_text='The trade offer this event is for',
						on_delete=django.db.models.deletion.CASCADE,
						related_name='history',
						to='trade.tradeoffer',
					),
				),
			],
			options={
				'verbose_name': 'Trade Offer History',
				'verbose_name_plural': 'Trade Offer Histories',
				'ordering': ('-created_at', '-id'),
				'indexes': [
					models.Index(fields=['trade_offer', '-created_at'], name='offer_history_offer_date_idx'),
					models.Index(fields=['event_type'], name='offer_history_event_type_idx'),
					models.Index(fields=['actor'], name='offer_history_actor_idx'),
				],
			},
		),
	]

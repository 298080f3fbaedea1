import uuid

import django.db.models.deletion
from django.db import migrations, models


def _tracked_fields():
    return [
        ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
        ("created_at", models.DateTimeField(auto_now_add=True)),
        ("updated_at", models.DateTimeField(auto_now=True)),
        ("deleted_at", models.DateTimeField(blank=True, null=True)),
    ]


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Company",
            fields=_tracked_fields() + [
                ("name", models.CharField(max_length=255)),
                ("document", models.CharField(blank=True, max_length=32, null=True)),
                ("email", models.EmailField(blank=True, max_length=254, null=True)),
                ("phone", models.CharField(blank=True, max_length=20, null=True)),
                ("zip_code", models.CharField(blank=True, default="", max_length=10)),
                ("city", models.CharField(blank=True, default="", max_length=100)),
                ("state", models.CharField(blank=True, default="", max_length=2)),
                ("address", models.TextField(blank=True, default="")),
                ("is_active", models.BooleanField(default=True)),
            ],
            options={
                "db_table": "companies",
                "ordering": ["name"],
                "verbose_name_plural": "companies",
            },
        ),
        migrations.CreateModel(
            name="Segment",
            fields=_tracked_fields() + [
                ("name", models.CharField(max_length=255)),
                ("description", models.TextField(blank=True, default="")),
                ("is_active", models.BooleanField(default=True)),
            ],
            options={
                "db_table": "segments",
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="Lead",
            fields=_tracked_fields() + [
                ("name", models.CharField(max_length=255)),
                ("email", models.EmailField(blank=True, max_length=254, null=True)),
                ("phone", models.CharField(blank=True, max_length=20, null=True)),
                ("zip_code", models.CharField(blank=True, default="", max_length=10)),
                ("city", models.CharField(blank=True, default="", max_length=100)),
                ("state", models.CharField(blank=True, default="", max_length=2)),
                ("address", models.TextField(blank=True, default="")),
                ("latitude", models.FloatField()),
                ("longitude", models.FloatField()),
                ("external_id", models.CharField(blank=True, max_length=255, null=True)),
                ("external_source", models.CharField(blank=True, max_length=255, null=True)),
                ("status", models.CharField(
                    choices=[
                        ("new", "New"), ("pending", "Pending"), ("approved", "Approved"),
                        ("rejected", "Rejected"), ("archived", "Archived"), ("sent", "Sent"),
                    ],
                    default="new", max_length=20,
                )),
                ("is_active", models.BooleanField(default=True)),
                ("segment", models.ForeignKey(
                    blank=True, null=True, on_delete=django.db.models.deletion.PROTECT,
                    related_name="leads", to="allocation.segment",
                )),
            ],
            options={
                "db_table": "leads",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["latitude", "longitude"], name="idx_lead_coords"),
                    models.Index(fields=["status", "is_active"], name="idx_lead_status_active"),
                    models.Index(fields=["external_source", "external_id"], name="idx_lead_external"),
                ],
            },
        ),
        migrations.CreateModel(
            name="LeadPhone",
            fields=_tracked_fields() + [
                ("phone_original", models.CharField(max_length=40)),
                ("phone_normalized", models.CharField(db_index=True, max_length=20)),
                ("is_active", models.BooleanField(default=True)),
                ("lead", models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name="phones", to="allocation.lead",
                )),
            ],
            options={
                "db_table": "lead_phones",
                "ordering": ["created_at"],
            },
        ),
        migrations.CreateModel(
            name="Store",
            fields=_tracked_fields() + [
                ("name", models.CharField(max_length=255)),
                ("document", models.CharField(blank=True, max_length=32, null=True)),
                ("email", models.EmailField(blank=True, max_length=254, null=True)),
                ("phone", models.CharField(blank=True, max_length=20, null=True)),
                ("zip_code", models.CharField(blank=True, default="", max_length=10)),
                ("city", models.CharField(blank=True, default="", max_length=100)),
                ("state", models.CharField(blank=True, default="", max_length=2)),
                ("address", models.TextField(blank=True, default="")),
                ("is_active", models.BooleanField(default=True)),
                ("company", models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name="stores", to="allocation.company",
                )),
            ],
            options={
                "db_table": "stores",
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="StoreLocation",
            fields=_tracked_fields() + [
                ("name", models.CharField(blank=True, default="", max_length=255)),
                ("zip_code", models.CharField(blank=True, default="", max_length=10)),
                ("city", models.CharField(blank=True, default="", max_length=100)),
                ("state", models.CharField(blank=True, default="", max_length=2)),
                ("address", models.TextField(blank=True, default="")),
                ("latitude", models.FloatField()),
                ("longitude", models.FloatField()),
                ("coverage_radius", models.PositiveIntegerField(default=10)),
                ("is_main", models.BooleanField(default=False)),
                ("is_active", models.BooleanField(default=True)),
                ("store", models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name="locations", to="allocation.store",
                )),
            ],
            options={
                "db_table": "store_locations",
                "ordering": ["-is_main", "created_at"],
                "indexes": [
                    models.Index(fields=["latitude", "longitude"], name="idx_location_coords"),
                    models.Index(fields=["store", "is_active"], name="idx_location_store_active"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Contract",
            fields=_tracked_fields() + [
                ("owner_type", models.CharField(
                    choices=[("company", "Company"), ("store", "Store")], max_length=10,
                )),
                ("owner_id", models.UUIDField()),
                ("start_date", models.DateField()),
                ("end_date", models.DateField()),
                ("lead_price", models.DecimalField(decimal_places=2, default=0, max_digits=10)),
                ("leads_contracted", models.IntegerField()),
                ("leads_delivered", models.IntegerField(default=0)),
                ("leads_returned", models.IntegerField(default=0)),
                ("leads_warranty_used", models.IntegerField(default=0)),
                ("warranty_percentage", models.IntegerField(default=30)),
                ("is_active", models.BooleanField(default=True)),
                ("completed_at", models.DateTimeField(blank=True, null=True)),
                ("auto_close_at", models.DateTimeField(blank=True, null=True)),
            ],
            options={
                "db_table": "contracts",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["owner_type", "owner_id", "is_active"], name="idx_contract_owner_active"),
                    models.Index(fields=["is_active", "auto_close_at"], name="idx_contract_auto_close"),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        condition=models.Q(("is_active", True), ("deleted_at__isnull", True)),
                        fields=("owner_type", "owner_id"),
                        name="uniq_active_contract_per_owner",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="LeadAssignment",
            fields=_tracked_fields() + [
                ("status", models.CharField(
                    choices=[
                        ("new", "New"),
                        ("contacted", "Contacted"),
                        ("converted", "Converted"),
                        ("not_interested", "Not interested"),
                        ("invalid", "Invalid"),
                        ("warranty_pending", "Warranty pending"),
                        ("warranty_approved", "Warranty approved"),
                        ("warranty_rejected", "Warranty rejected"),
                        ("warranty_waiting_replacement", "Warranty waiting replacement"),
                        ("warranty_replaced", "Warranty replaced"),
                    ],
                    default="new", max_length=40,
                )),
                ("notes", models.TextField(blank=True, null=True)),
                ("is_warranty", models.BooleanField(default=False)),
                ("contract", models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name="assignments", to="allocation.contract",
                )),
                ("lead", models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name="assignments", to="allocation.lead",
                )),
                ("store", models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name="assignments", to="allocation.store",
                )),
            ],
            options={
                "db_table": "lead_stores",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["store", "-created_at"], name="idx_assignment_store_date"),
                    models.Index(fields=["lead", "-created_at"], name="idx_assignment_lead_date"),
                    models.Index(fields=["contract"], name="idx_assignment_contract"),
                ],
            },
        ),
        migrations.CreateModel(
            name="LeadWarranty",
            fields=_tracked_fields() + [
                ("status", models.CharField(
                    choices=[
                        ("pending", "Pending"),
                        ("approved", "Approved"),
                        ("rejected", "Rejected"),
                        ("waiting_replacement", "Waiting replacement"),
                        ("replaced", "Replaced"),
                    ],
                    default="pending", max_length=30,
                )),
                ("return_reason", models.TextField()),
                ("analysis_notes", models.TextField(blank=True, null=True)),
                ("analyzed_by", models.CharField(blank=True, max_length=100, null=True)),
                ("analyzed_at", models.DateTimeField(blank=True, null=True)),
                ("replaced_at", models.DateTimeField(blank=True, null=True)),
                ("assignment", models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name="warranties", to="allocation.leadassignment",
                )),
                ("new_lead", models.ForeignKey(
                    blank=True, null=True, on_delete=django.db.models.deletion.PROTECT,
                    related_name="replacement_warranties", to="allocation.lead",
                )),
            ],
            options={
                "db_table": "lead_warranties",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["status", "created_at"], name="idx_warranty_status_date"),
                ],
            },
        ),
    ]

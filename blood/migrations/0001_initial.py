import django.core.validators
from django.db import migrations, models


BLOOD_GROUP_CHOICES = [('A+', 'A+'), ('A-', 'A-'), ('B+', 'B+'), ('B-', 'B-'), ('AB+', 'AB+'), ('AB-', 'AB-'), ('O+', 'O+'), ('O-', 'O-')]


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='BloodInventory',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('blood_group', models.CharField(choices=BLOOD_GROUP_CHOICES, max_length=3, unique=True)),
                ('units_available', models.PositiveIntegerField(default=0)),
                ('minimum_stock', models.PositiveIntegerField(default=5)),
                ('maximum_capacity', models.PositiveIntegerField(default=100)),
                ('notes', models.CharField(blank=True, max_length=255)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('last_updated', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'Blood Inventory',
                'verbose_name_plural': 'Blood Inventory',
                'ordering': ['blood_group'],
                'constraints': [
                    models.CheckConstraint(condition=models.Q(('minimum_stock__lte', models.F('maximum_capacity'))), name='inventory_minimum_within_capacity'),
                    models.CheckConstraint(condition=models.Q(('units_available__lte', models.F('maximum_capacity'))), name='inventory_units_within_capacity'),
                ],
            },
        ),
        migrations.CreateModel(
            name='BloodRequest',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('requester_name', models.CharField(max_length=100)),
                ('contact_email', models.EmailField(max_length=254)),
                ('contact_phone', models.CharField(max_length=16, validators=[django.core.validators.RegexValidator('^[+]?[0-9]{10,15}$', message='Invalid phone number format')])),
                ('hospital_name', models.CharField(max_length=150)),
                ('patient_name', models.CharField(max_length=100)),
                ('medical_reason', models.CharField(blank=True, max_length=500)),
                ('blood_group', models.CharField(choices=BLOOD_GROUP_CHOICES, db_index=True, max_length=3)),
                ('units_requested', models.PositiveSmallIntegerField(validators=[django.core.validators.MinValueValidator(1), django.core.validators.MaxValueValidator(10)])),
                ('urgency_level', models.CharField(choices=[('NORMAL', 'Normal'), ('URGENT', 'Urgent'), ('EMERGENCY', 'Emergency')], default='NORMAL', max_length=10)),
                ('status', models.CharField(choices=[('PENDING', 'Pending Review'), ('APPROVED', 'Approved'), ('REJECTED', 'Rejected'), ('FULFILLED', 'Fulfilled'), ('CANCELLED', 'Cancelled')], db_index=True, default='PENDING', max_length=10)),
                ('admin_notes', models.CharField(blank=True, max_length=500)),
                ('processed_by', models.CharField(blank=True, max_length=100)),
                ('processed_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'ordering': ['-created_at', '-id'],
            },
        ),
        migrations.CreateModel(
            name='ActionAuditLog',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('action', models.CharField(choices=[('CREATE_GROUP', 'Create Blood Group'), ('ADD_UNITS', 'Add Units'), ('REMOVE_UNITS', 'Remove Units'), ('UPDATE_BOUNDS', 'Update Stock Bounds'), ('SUBMIT_REQUEST', 'Submit Request'), ('APPROVE_REQUEST', 'Approve Request'), ('REJECT_REQUEST', 'Reject Request'), ('FULFILL_REQUEST', 'Fulfill Request'), ('CANCEL_REQUEST', 'Cancel Request')], max_length=32)),
                ('entity_type', models.CharField(choices=[('INVENTORY', 'Blood Inventory'), ('REQUEST', 'Blood Request')], max_length=16)),
                ('entity_id', models.PositiveIntegerField(db_index=True)),
                ('blood_group', models.CharField(blank=True, max_length=3)),
                ('units', models.PositiveIntegerField(default=0)),
                ('units_before', models.PositiveIntegerField(blank=True, null=True)),
                ('units_after', models.PositiveIntegerField(blank=True, null=True)),
                ('status_before', models.CharField(blank=True, max_length=20)),
                ('status_after', models.CharField(blank=True, max_length=20)),
                ('actor_username', models.CharField(blank=True, max_length=150)),
                ('notes', models.CharField(blank=True, max_length=500)),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True)),
            ],
            options={
                'verbose_name': 'Action Audit Log',
                'verbose_name_plural': 'Action Audit Logs',
                'ordering': ['-created_at', '-id'],
            },
        ),
    ]

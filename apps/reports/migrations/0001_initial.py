import uuid
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('purchases', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='GeneratedReport',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('profile_id', models.UUIDField(db_index=True)),
                ('report_area', models.CharField(choices=[('general', 'General'), ('career', 'Career'), ('relationships', 'Relationships'), ('finances', 'Finances'), ('health', 'Health'), ('universal', 'Any area')], max_length=20)),
                ('content', models.JSONField(default=dict)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('credit', models.OneToOneField(on_delete=django.db.models.deletion.PROTECT, related_name='report', to='purchases.purchasecredit')),
            ],
            options={
                'db_table': 'generated_reports',
                'ordering': ['-created_at'],
            },
        ),
    ]

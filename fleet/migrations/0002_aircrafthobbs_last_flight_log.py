import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ('fleet', '0001_initial'),
        ('flightlogs', '0001_initial'),
    ]

    operations = [
        migrations.AddField(
            model_name='aircrafthobbs',
            name='last_flight_log',
            field=models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to='flightlogs.flightlog'),
        ),
    ]

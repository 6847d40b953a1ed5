from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ("bookings", "0001_initial"),
    ]

    operations = [
        migrations.AddField(
            model_name="booking",
            name="balance_reminder_sent_at",
            field=models.DateTimeField(blank=True, null=True),
        ),
    ]

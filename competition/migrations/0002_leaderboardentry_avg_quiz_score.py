from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ("competition", "0001_initial"),
    ]

    operations = [
        migrations.AddField(
            model_name="leaderboardentry",
            name="avg_quiz_score",
            field=models.PositiveSmallIntegerField(default=0),
        ),
    ]

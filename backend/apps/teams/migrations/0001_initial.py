# Generated initial migration for teams app
import apps.teams.models
import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


def _criterion(default=1):
    return models.PositiveSmallIntegerField(
        default=default,
        validators=[django.core.validators.MinValueValidator(1), django.core.validators.MaxValueValidator(5)],
    )


STATUS_CHOICES = [('not_started', 'Not started'), ('pending', 'Pending review'), ('approved', 'Approved')]


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='TeamNumberSequence',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('singleton', models.BooleanField(default=True, unique=True)),
                ('last_value', models.PositiveIntegerField(default=0)),
            ],
        ),
        migrations.CreateModel(
            name='Team',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('team_number', models.PositiveIntegerField(unique=True)),
                ('name', models.CharField(max_length=120)),
                ('password', models.CharField(max_length=256)),
                ('problem_statement', models.TextField(blank=True, default='')),
                ('theme', models.CharField(blank=True, default='', max_length=120)),
                ('elo_score', models.IntegerField(default=apps.teams.models.default_elo)),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'ordering': ['team_number'],
            },
        ),
        migrations.CreateModel(
            name='Participant',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=120)),
                ('background', models.CharField(blank=True, default='', max_length=200)),
                ('role', models.CharField(blank=True, default='', max_length=120)),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('team', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='participants', to='teams.team')),
            ],
            options={
                'ordering': ['id'],
            },
        ),
        migrations.CreateModel(
            name='Milestones',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('brainstorming_status', models.CharField(choices=STATUS_CHOICES, default='not_started', max_length=16)),
                ('prd_status', models.CharField(choices=STATUS_CHOICES, default='not_started', max_length=16)),
                ('build_status', models.CharField(choices=STATUS_CHOICES, default='not_started', max_length=16)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('team', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='milestones', to='teams.team')),
            ],
            options={
                'verbose_name_plural': 'milestones',
            },
        ),
        migrations.CreateModel(
            name='ToolUsage',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('coding_tools', models.JSONField(blank=True, default=list)),
                ('llm_used', models.CharField(blank=True, default='', max_length=200)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('team', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='tool_usage', to='teams.team')),
            ],
        ),
        migrations.CreateModel(
            name='ProgressUpdates',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('screen_recording_url', models.CharField(blank=True, default='', max_length=500)),
                ('submission_url', models.CharField(blank=True, default='', max_length=500)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('team', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='progress_updates', to='teams.team')),
            ],
            options={
                'verbose_name_plural': 'progress updates',
            },
        ),
        migrations.CreateModel(
            name='Evaluation',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('novelty', _criterion()),
                ('fastest_to_build', _criterion()),
                ('feature_count', _criterion()),
                ('clarity', _criterion()),
                ('impact_reach', _criterion()),
                ('total_score', models.PositiveSmallIntegerField(default=5, editable=False)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('team', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='evaluation', to='teams.team')),
            ],
        ),
    ]

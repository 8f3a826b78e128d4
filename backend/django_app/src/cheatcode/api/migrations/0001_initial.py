from django.db import migrations, models
import django.db.models.deletion
import django.utils.timezone
from django.conf import settings

import cheatcode.api.models


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Group',
            fields=[
                ('id', models.CharField(default=cheatcode.api.models._group_id, primary_key=True, serialize=False, max_length=32)),
                ('name', models.CharField(max_length=100)),
                ('createdAt', models.DateTimeField(default=django.utils.timezone.now)),
                ('createdBy', models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='created_groups', to=settings.AUTH_USER_MODEL)),
            ],
        ),
        migrations.CreateModel(
            name='Profile',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('displayName', models.CharField(blank=True, default='', max_length=20)),
                ('color', models.CharField(blank=True, null=True, max_length=7)),
                ('profileCompleted', models.BooleanField(default=False)),
                ('tutorialSeen', models.BooleanField(default=False)),
                ('deletedGroups', models.JSONField(blank=True, default=list)),
                ('pinnedGroup', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to='api.group')),
                ('user', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='profile', to=settings.AUTH_USER_MODEL)),
            ],
        ),
        migrations.CreateModel(
            name='Membership',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('active', models.BooleanField(default=True)),
                ('color', models.CharField(blank=True, null=True, max_length=7)),
                ('joinedAt', models.DateTimeField(default=django.utils.timezone.now)),
                ('group', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='memberships', to='api.group')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='memberships', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'unique_together': {('group', 'user')},
            },
        ),
        migrations.CreateModel(
            name='Task',
            fields=[
                ('id', models.CharField(default=cheatcode.api.models._task_id, primary_key=True, serialize=False, max_length=64)),
                ('text', models.CharField(max_length=500)),
                ('status', models.CharField(choices=[('not-done', 'not-done'), ('completed', 'completed'), ('postponed', 'postponed'), ('suggested', 'suggested'), ('info', 'info')], default='not-done', max_length=16)),
                ('day', models.PositiveSmallIntegerField()),
                ('weekId', models.CharField(db_index=True, max_length=8)),
                ('createdAt', models.DateTimeField(default=django.utils.timezone.now)),
                ('timerStartedAt', models.DateTimeField(blank=True, null=True)),
                ('elapsedSeconds', models.PositiveIntegerField(default=0)),
                ('createdBy', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='tasks', to=settings.AUTH_USER_MODEL)),
                ('group', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, related_name='tasks', to='api.group')),
                ('suggestedBy', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='suggested_tasks', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['createdAt', 'id'],
            },
        ),
        migrations.CreateModel(
            name='Comment',
            fields=[
                ('id', models.CharField(default=cheatcode.api.models._task_id, primary_key=True, serialize=False, max_length=64)),
                ('userName', models.CharField(max_length=20)),
                ('userColor', models.CharField(max_length=7)),
                ('text', models.TextField()),
                ('mentions', models.JSONField(blank=True, default=list)),
                ('weekId', models.CharField(db_index=True, max_length=8)),
                ('createdAt', models.DateTimeField(default=django.utils.timezone.now)),
                ('group', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='comments', to='api.group')),
                ('task', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='comments', to='api.task')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='comments', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['-createdAt'],
            },
        ),
        migrations.CreateModel(
            name='PushSubscription',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('endpoint', models.TextField()),
                ('p256dh', models.TextField()),
                ('auth', models.TextField()),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='push_subs', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'unique_together': {('user', 'endpoint')},
            },
        ),
    ]

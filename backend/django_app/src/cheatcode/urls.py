from django.contrib import admin
from django.urls import path
from cheatcode.api import group_views as groups
from cheatcode.api import task_views as tasks
from cheatcode.api import views as api

urlpatterns = [
    path('admin/', admin.site.urls),

    # Health and ping (accept with and without trailing slash)
    path('healthz', api.healthz),
    path('healthz/', api.healthz),
    path('api/ping', api.ping),
    path('api/ping/', api.ping),

    # Auth endpoints
    path('api/auth/register', api.register),
    path('api/auth/register/', api.register),
    path('api/auth/login', api.login_view),
    path('api/auth/login/', api.login_view),
    path('api/auth/logout', api.logout_view),
    path('api/auth/logout/', api.logout_view),
    path('api/auth/me', api.me),
    path('api/auth/me/', api.me),

    # Profile
    path('api/profile', api.profile),
    path('api/profile/', api.profile),
    path('api/profile/preferences', api.preferences),
    path('api/profile/preferences/', api.preferences),

    # Week navigation
    path('api/weeks/month', api.week_for_month),
    path('api/weeks/month/', api.week_for_month),
    path('api/weeks/<str:week_id>', api.week_info),
    path('api/weeks/<str:week_id>/', api.week_info),

    # Groups, invites, grid, comments and stats
    path('api/groups', groups.groups),
    path('api/groups/', groups.groups),
    path('api/groups/<str:group_id>', groups.group_detail),
    path('api/groups/<str:group_id>/', groups.group_detail),
    path('api/groups/<str:group_id>/leave', groups.leave),
    path('api/groups/<str:group_id>/color', groups.member_color),
    path('api/groups/<str:group_id>/week', groups.week_grid),
    path('api/groups/<str:group_id>/comments', groups.comments),
    path('api/groups/<str:group_id>/stats', groups.weekly_stats),
    path('api/groups/<str:group_id>/stats/yearly', groups.yearly_stats),
    path('api/invite/<str:code>', groups.invite),
    path('api/invite/<str:code>/', groups.invite),

    # Tasks collection and detail
    path('api/tasks', tasks.tasks),
    path('api/tasks/', tasks.tasks),
    path('api/tasks/<str:task_id>', tasks.task_detail),
    path('api/tasks/<str:task_id>/', tasks.task_detail),
    path('api/tasks/<str:task_id>/cycle', tasks.cycle_status),
    path('api/tasks/<str:task_id>/accept', tasks.accept_suggestion),
    path('api/tasks/<str:task_id>/reject', tasks.reject_suggestion),
    path('api/tasks/<str:task_id>/timer/<str:action>', tasks.timer),

    # Push subscription and fan-out
    path('api/push/vapid-public-key', api.vapid_public_key),
    path('api/push/vapid-public-key/', api.vapid_public_key),
    path('api/push/subscribe', api.push_subscribe),
    path('api/push/subscribe/', api.push_subscribe),
    path('api/notify', api.notify),
    path('api/notify/', api.notify),
]

from django.contrib import admin

from cheatcode.api.models import Comment, Group, Membership, Profile, PushSubscription, Task


class MembershipInline(admin.TabularInline):
    model = Membership
    extra = 0


@admin.register(Group)
class GroupAdmin(admin.ModelAdmin):
    list_display = ('id', 'name', 'createdBy', 'createdAt')
    inlines = [MembershipInline]


@admin.register(Task)
class TaskAdmin(admin.ModelAdmin):
    list_display = ('text', 'status', 'weekId', 'day', 'createdBy', 'group')
    list_filter = ('status', 'weekId')


admin.site.register(Profile)
admin.site.register(Comment)
admin.site.register(PushSubscription)

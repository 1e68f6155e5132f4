from django.contrib import admin
from .models import Client, CoachClient


class CoachClientInline(admin.TabularInline):
    model = CoachClient
    extra = 0
    readonly_fields = ['created_at']


@admin.register(Client)
class ClientAdmin(admin.ModelAdmin):
    list_display = ['id', 'display_name', 'email', 'user_id', 'created_at']
    search_fields = ['display_name', 'email']
    readonly_fields = ['created_at']
    inlines = [CoachClientInline]

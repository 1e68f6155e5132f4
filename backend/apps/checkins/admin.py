from django.contrib import admin
from .models import CheckIn


@admin.register(CheckIn)
class CheckInAdmin(admin.ModelAdmin):
    list_display = ['id', 'client_id', 'date', 'created_at', 'updated_at']
    list_filter = ['date']
    search_fields = ['client_id']
    readonly_fields = ['created_at', 'updated_at']

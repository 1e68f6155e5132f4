from django.contrib import admin
from .models import Insight


@admin.register(Insight)
class InsightAdmin(admin.ModelAdmin):
    list_display = ['id', 'client_id', 'range_start', 'range_end', 'avg_sleep', 'avg_soreness', 'weight_delta', 'updated_at']
    search_fields = ['client_id']
    readonly_fields = ['created_at', 'updated_at']

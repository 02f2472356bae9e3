from django.contrib import admin

from audit.admin import AuditableModelAdmin, SoftDeletableModelAdmin

from .models import Company, Customer


@admin.register(Company)
class CompanyAdmin(AuditableModelAdmin):
    list_display = ['id', 'name', 'created_at', 'updated_at']


@admin.register(Customer)
class CustomerAdmin(SoftDeletableModelAdmin):
    list_display = ['id', 'name', 'email', 'deleted_at']

"""Admin configuration for study cases."""

from django.contrib import admin

from .models import (
    Expense,
    ExpenseClassification,
    ExportOperation,
    ImportOperation,
    ImportTaxLine,
    StudyCase,
)


class ImportTaxLineInline(admin.TabularInline):
    """Read-only tax lines of an import."""

    model = ImportTaxLine
    extra = 0
    readonly_fields = ("concept", "taxable_base", "rate", "amount")


@admin.register(StudyCase)
class StudyCaseAdmin(admin.ModelAdmin):
    """Admin configuration for StudyCase model."""

    list_display = ("id", "name", "user", "status", "import_count", "created_at")
    list_filter = ("status",)
    search_fields = ("name", "user__username")
    date_hierarchy = "created_at"

    @admin.display(description="Imports")
    def import_count(self, obj: StudyCase) -> int:
        """Return number of imports registered in the case."""
        return obj.imports.count()


@admin.register(ImportOperation)
class ImportOperationAdmin(admin.ModelAdmin):
    """Admin configuration for ImportOperation model."""

    list_display = (
        "id",
        "study_case",
        "hs10",
        "currency",
        "cif",
        "customs_debt",
        "payable",
        "operation_date",
    )
    list_filter = ("currency", "importer_profile")
    search_fields = ("hs10", "description")
    readonly_fields = ("created_at", "updated_at")
    inlines = [ImportTaxLineInline]

    @admin.display(description="Payable at border")
    def payable(self, obj: ImportOperation) -> str:
        """Return the amount payable with its currency."""
        return f"{obj.payable_at_border} {obj.currency}"


@admin.register(ExportOperation)
class ExportOperationAdmin(admin.ModelAdmin):
    """Admin configuration for ExportOperation model."""

    list_display = ("id", "study_case", "description", "sale_value", "currency", "is_domestic_sale")
    list_filter = ("currency", "is_domestic_sale")


@admin.register(Expense)
class ExpenseAdmin(admin.ModelAdmin):
    """Admin configuration for Expense model."""

    list_display = ("id", "study_case", "classification", "description", "amount", "currency")
    list_filter = ("classification", "currency")


admin.site.register(ExpenseClassification)

# amc/api_urls.py
from django.urls import path

from amc.views.analytics import CommitteePerformanceView, DashboardView, TrendsView
from amc.views.auth_views import ChangePasswordView, LoginView, LogoutView, MeView, RegisterView
from amc.views.CommitteeViews import (
    CheckpostDetailView,
    CheckpostListCreateView,
    CommitteeDetailView,
    CommitteeListCreateView,
)
from amc.views.receipt_batch_views import (
    ReceiptBulkCreateView,
    ReceiptBulkUpdateView,
    ReceiptExportView,
    ReceiptImportView,
)
from amc.views.ReceiptViews import ReceiptDetailView, ReceiptListCreateView
from amc.views.reports import MarketFeeReportView
from amc.views.Search import SearchView
from amc.views.system import (
    AuditLogListView,
    HealthView,
    NotificationListView,
    SystemBackupView,
    SystemConfigView,
    SystemStatsView,
)
from amc.views.TargetViews import TargetDetailView, TargetListCreateView
from amc.views.users import UserDetailView, UserListView

urlpatterns = [
    # Auth
    path("auth/login", LoginView.as_view(), name="auth-login"),
    path("auth/register", RegisterView.as_view(), name="auth-register"),
    path("auth/me", MeView.as_view(), name="auth-me"),
    path("auth/logout", LogoutView.as_view(), name="auth-logout"),
    path("auth/change-password", ChangePasswordView.as_view(), name="auth-change-password"),
    path("users", UserListView.as_view(), name="user-list"),
    path("users/<int:pk>", UserDetailView.as_view(), name="user-detail"),
    # Catalog
    path("committees", CommitteeListCreateView.as_view(), name="committee-list"),
    path("committees/<int:pk>", CommitteeDetailView.as_view(), name="committee-detail"),
    path("checkposts", CheckpostListCreateView.as_view(), name="checkpost-list"),
    path("checkposts/<int:pk>", CheckpostDetailView.as_view(), name="checkpost-detail"),
    # Receipts
    path("receipts", ReceiptListCreateView.as_view(), name="receipt-list"),
    path("receipts/bulk", ReceiptBulkCreateView.as_view(), name="receipt-bulk-create"),
    path("receipts/bulk/update", ReceiptBulkUpdateView.as_view(), name="receipt-bulk-update"),
    path("receipts/import", ReceiptImportView.as_view(), name="receipt-import"),
    path("receipts/export", ReceiptExportView.as_view(), name="receipt-export"),
    path("receipts/<int:pk>", ReceiptDetailView.as_view(), name="receipt-detail"),
    # Targets
    path("targets", TargetListCreateView.as_view(), name="target-list"),
    path("targets/<int:pk>", TargetDetailView.as_view(), name="target-detail"),
    # Analytics and reports
    path("analytics/dashboard", DashboardView.as_view(), name="analytics-dashboard"),
    path("analytics/trends", TrendsView.as_view(), name="analytics-trends"),
    path(
        "analytics/committee-performance",
        CommitteePerformanceView.as_view(),
        name="analytics-committee-performance",
    ),
    path("reports/market-fees", MarketFeeReportView.as_view(), name="report-market-fees"),
    path("search", SearchView.as_view(), name="search"),
    path("notifications", NotificationListView.as_view(), name="notifications"),
    # System
    path("health", HealthView.as_view(), name="health"),
    path("system/stats", SystemStatsView.as_view(), name="system-stats"),
    path("system/backup", SystemBackupView.as_view(), name="system-backup"),
    path("system/config", SystemConfigView.as_view(), name="system-config"),
    path("audit-logs", AuditLogListView.as_view(), name="audit-log-list"),
]

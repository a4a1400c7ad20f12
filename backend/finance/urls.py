from django.urls import path

from . import views

app_name = "finance"

urlpatterns = [
    path("finance/statistics", views.statistics, name="statistics"),
    path("finance/transactions", views.transactions, name="transactions"),
    path("finance/programs", views.programs_funds, name="programs_funds"),
    path("finance/programs/<int:program_id>/transactions", views.program_transactions, name="program_transactions"),
    path("finance/programs/<int:program_id>/summary", views.program_summary, name="program_summary"),
    path("finance/programs/<int:program_id>/donors", views.program_donors, name="program_donors"),
    path("finance/programs/<int:program_id>/donors.csv", views.export_program_donors_csv, name="program_donors_csv"),
    path("finance/top-donors", views.top_donors, name="top_donors"),
    path("finance/trends", views.trends, name="trends"),
    path("leaderboard/", views.leaderboard, name="leaderboard"),
    path("leaderboard/statistics", views.leaderboard_statistics, name="leaderboard_statistics"),
    path("leaderboard/rank/<str:identifier>", views.donor_rank, name="donor_rank"),
]

"""Service wiring — one explicitly constructed context per session."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from household.data.repositories import (
    CategoriesRepository,
    CompletionEventsRepository,
    GroceriesRepository,
    ProfilesRepository,
    TasksRepository,
)
from household.services.admin_service import AdminService
from household.services.auth_service import AuthService
from household.services.categories_service import CategoriesService
from household.services.groceries_service import GroceriesService
from household.services.household_service import HouseholdService
from household.services.tasks_service import TasksService

if TYPE_CHECKING:
    from household.ports.auth_port import AuthPort
    from household.ports.store_port import StorePort


@dataclass
class AppServices:
    auth_service: AuthService
    household_service: HouseholdService
    categories_service: CategoriesService
    tasks_service: TasksService
    groceries_service: GroceriesService
    admin_service: AdminService
    profiles_repository: ProfilesRepository
    categories_repository: CategoriesRepository
    tasks_repository: TasksRepository
    completion_repository: CompletionEventsRepository


def create_app_services(
    store: StorePort | None = None,
    auth: AuthPort | None = None,
    household_id: str | None = None,
    admin_email: str | None = None,
) -> AppServices:
    """Build every repository and service over one store/auth pair.

    Without arguments the pair comes from the STORE_BACKEND setting.
    """
    if store is None or auth is None:
        from household.adapters.store_factory import create_backend

        default_store, default_auth = create_backend()
        store = store or default_store
        auth = auth or default_auth

    profiles = ProfilesRepository(store, household_id)
    categories = CategoriesRepository(store, household_id)
    tasks = TasksRepository(store, household_id)
    groceries = GroceriesRepository(store, household_id)
    completions = CompletionEventsRepository(store, household_id)

    return AppServices(
        auth_service=AuthService(auth, profiles, admin_email),
        household_service=HouseholdService(profiles, categories, tasks, groceries, completions),
        categories_service=CategoriesService(categories, tasks),
        tasks_service=TasksService(tasks, completions, categories),
        groceries_service=GroceriesService(groceries),
        admin_service=AdminService(completions, tasks, profiles),
        profiles_repository=profiles,
        categories_repository=categories,
        tasks_repository=tasks,
        completion_repository=completions,
    )

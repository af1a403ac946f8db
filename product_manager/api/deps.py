from fastapi import Request

from product_manager.repositories.product_repo import ProductStore
from product_manager.services.controller import AppController


def get_controller(request: Request) -> AppController:
    return request.app.state.controller


def get_store(request: Request) -> ProductStore:
    return request.app.state.controller.store

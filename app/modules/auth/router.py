from fastapi import APIRouter, status

from app.dependencies.dbDependecies import db_dependency
from app.dependencies.userDependencies import user_dependency
from app.modules.auth.service import AuthService
from app.modules.auth.schemas import UserCreate, UserLogin, UserOut, TokenResponse

auth_router = APIRouter(prefix="/user", tags=["Auth"])

@auth_router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
def register(user_data: UserCreate, db: db_dependency):
    """
    Register a new operator and return a bearer token.
    """
    auth_service = AuthService(db)
    return auth_service.create_user(user_data)

@auth_router.post("/login", response_model=TokenResponse)
def login(credentials: UserLogin, db: db_dependency):
    """
    Log in with email and password. Returns a bearer token.
    """
    auth_service = AuthService(db)
    return auth_service.login(credentials.email, credentials.password)

@auth_router.get("/me", response_model=UserOut)
def get_current_user_info(current_user: user_dependency):
    return current_user

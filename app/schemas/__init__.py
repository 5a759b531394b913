from app.schemas.auth import (
    LoginRequest,
    MessageResponse,
    ResendVerificationRequest,
    SignupRequest,
    UserEnvelope,
    UserResponse,
    VerificationRequiredResponse,
    VerifyEmailRequest,
)
from app.schemas.memory import MemoryCreate, MemoryFile, MemoryResponse, file_kind_for_mime

from otpflow.api.routes.verification import router as verification_router

__all__ = ["verification_router"]

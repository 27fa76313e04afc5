from .pyjwt_token_provider import PyJWTTokenProvider

__all__ = ["PyJWTTokenProvider"]

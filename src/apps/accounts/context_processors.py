from .utils import get_identity


def identity(request):
    return {"identity": get_identity(getattr(request, "user", None))}

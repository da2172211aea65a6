"""Tests for sumish.loader: convention-based models and libraries."""

import pytest

from sumish.container import Container
from sumish.errors import InvalidArgument
from sumish.loader import Loader

USER_MODEL = """
class UserModel:
    def find(self, id):
        return {"id": id}
"""

BLOG_POST_MODEL = """
from sumish.container import Container


class BlogPostModel:
    def __init__(self, container: Container, table: str = "posts"):
        self.container = container
        self.table = table
"""

PDF_LIBRARY = """
class PdfGenerator:
    def generate(self):
        return b"%PDF"
"""

BROKEN_LIBRARY = """
import missing_dependency_xyz


class Broken:
    pass
"""


@pytest.fixture
def container() -> Container:
    return Container()


class TestLoader:
    def test_model_loading(self, container: Container, make_package) -> None:
        models = make_package("models", {"user": USER_MODEL})
        model = Loader(container, models=models).model("User")
        assert type(model).__name__ == "UserModel"
        assert model.find(3) == {"id": 3}

    def test_model_name_with_suffix(self, container: Container, make_package) -> None:
        models = make_package("models", {"user": USER_MODEL})
        loader = Loader(container, models=models)
        assert type(loader.model("UserModel")).__name__ == "UserModel"

    def test_model_autowired(self, container: Container, make_package) -> None:
        models = make_package("models", {"blog_post": BLOG_POST_MODEL})
        model = Loader(container, models=models).model("BlogPost")
        assert model.container is container
        assert model.table == "posts"

    def test_library_loading(self, container: Container, make_package) -> None:
        libraries = make_package("libraries", {"pdf_generator": PDF_LIBRARY})
        library = Loader(container, libraries=libraries).library("PdfGenerator")
        assert library.generate() == b"%PDF"

    def test_model_caching(self, container: Container, make_package) -> None:
        models = make_package("models", {"user": USER_MODEL})
        loader = Loader(container, models=models)
        assert loader.model("User") is loader.model("User")

    def test_library_caching(self, container: Container, make_package) -> None:
        libraries = make_package("libraries", {"pdf_generator": PDF_LIBRARY})
        loader = Loader(container, libraries=libraries)
        assert loader.library("PdfGenerator") is loader.library("PdfGenerator")

    def test_cache_shared_across_loaders(self, container: Container, make_package) -> None:
        models = make_package("models", {"user": USER_MODEL})
        first = Loader(container, models=models).model("User")
        second = Loader(container, models=models).model("User")
        assert first is second

    def test_missing_module(self, container: Container, make_package) -> None:
        models = make_package("models", {})
        with pytest.raises(InvalidArgument, match="Resource class not found"):
            Loader(container, models=models).model("Ghost")

    def test_missing_class(self, container: Container, make_package) -> None:
        libraries = make_package("libraries", {"pdf_generator": PDF_LIBRARY})
        with pytest.raises(InvalidArgument, match="Resource class not found"):
            Loader(container, libraries=libraries).library("pdf_generator")

    def test_inner_import_error_propagates(self, container: Container, make_package) -> None:
        libraries = make_package("libraries", {"broken": BROKEN_LIBRARY})
        with pytest.raises(ModuleNotFoundError, match="missing_dependency_xyz"):
            Loader(container, libraries=libraries).library("Broken")

    def test_resolved_through_container(self, container: Container, make_package) -> None:
        models = make_package("models", {"user": USER_MODEL})
        container.set("loader", Loader, {"models": models})
        assert type(container.get("loader").model("User")).__name__ == "UserModel"

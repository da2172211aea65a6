"""Model and library loader.

Resolves short resource names to classes by convention and builds them
once per container::

    loader.model("User")            # app.models.user:UserModel
    loader.library("PdfGenerator")  # app.libraries.pdf_generator:PdfGenerator
"""

import importlib
import logging
from typing import Any

from sumish.container import Container
from sumish.errors import InvalidArgument
from sumish.routing.resolvers import snake_case

logger = logging.getLogger("sumish.loader")


class Loader:
    """Convention-based loader for models and libraries.

    Instances are memoized through ``Container.cache`` under
    ``"model:<Name>"`` / ``"library:<Name>"``, so repeated loads return
    the same object.
    """

    __slots__ = ("_container", "libraries", "models")

    def __init__(
        self,
        container: Container,
        models: str = "app.models",
        libraries: str = "app.libraries",
    ) -> None:
        self._container = container
        self.models = models
        self.libraries = libraries

    def model(self, name: str) -> Any:
        """Load ``<models>.<name>:<Name>Model``."""
        class_name = name if name.endswith("Model") else f"{name}Model"
        base = class_name.removesuffix("Model") or class_name
        return self._load("model", name, f"{self.models}.{snake_case(base)}", class_name)

    def library(self, name: str) -> Any:
        """Load ``<libraries>.<name>:<Name>``."""
        return self._load("library", name, f"{self.libraries}.{snake_case(name)}", name)

    def _load(self, kind: str, name: str, module_path: str, class_name: str) -> Any:
        return self._container.cache(
            f"{kind}:{name}",
            self._build,
            (module_path, class_name),
        )

    def _build(self, module_path: str, class_name: str) -> Any:
        try:
            module = importlib.import_module(module_path)
        except ModuleNotFoundError as exc:
            if exc.name and not module_path.startswith(exc.name):
                # The resource exists but one of its own imports is missing
                raise
            msg = f"Resource class not found: {module_path}:{class_name}"
            raise InvalidArgument(msg) from exc
        cls = getattr(module, class_name, None)
        if not isinstance(cls, type):
            msg = f"Resource class not found: {module_path}:{class_name}"
            raise InvalidArgument(msg)
        logger.debug("Loading %s:%s", module_path, class_name)
        return self._container.build(cls)

from typing import Optional, Protocol

import pytest

from serviceweave.container import ServiceContainer
from serviceweave.dependencies import DependenciesExtractor, ParameterInfo
from serviceweave.exceptions import InvalidReflectionError, UnreflectableClassError
from serviceweave.host import EventHost
from serviceweave.identifiers import identifier_key, identifier_name, is_identifier, load_class
from serviceweave.type_checks import is_builtin_annotation, is_instantiable


class Logger:
    pass


class FileLogger(Logger):
    pass


class Outer:
    class Inner:
        pass


class Reader(Protocol):
    def read(self) -> str: ...


class Mailer:
    def __init__(
        self,
        logger: Logger,
        host: str,
        port: int = 25,
        fallback: Optional[Logger] = None,
        *args: object,
        **kwargs: object,
    ) -> None:
        pass


class Untyped:
    def __init__(self, logger, retries=3) -> None:  # type: ignore[no-untyped-def]
        pass


class ForwardReference:
    def __init__(self, logger: "Undefined") -> None:  # type: ignore[name-defined]  # noqa: F821
        pass


@pytest.fixture()
def extractor() -> DependenciesExtractor:
    return DependenciesExtractor()


class TestDependenciesExtractor:
    def test_parameters_in_declaration_order(self, extractor: DependenciesExtractor) -> None:
        assert extractor.get_dependencies(Mailer) == (
            ParameterInfo("logger", Logger, has_default=False),
            ParameterInfo("host", None, has_default=False),
            ParameterInfo("port", None, has_default=True),
            ParameterInfo("fallback", None, has_default=True),
        )

    def test_untyped_parameters_are_resolved_by_name(
        self,
        extractor: DependenciesExtractor,
    ) -> None:
        assert extractor.get_dependencies(Untyped) == (
            ParameterInfo("logger", None, has_default=False),
            ParameterInfo("retries", None, has_default=True),
        )

    def test_declared_dependencies_win(self, extractor: DependenciesExtractor) -> None:
        extractor.declare(Untyped, {"logger": Logger})
        extractor.declare(Mailer, {"logger": FileLogger})

        assert extractor.get_dependencies(Untyped)[0] == ParameterInfo("logger", Logger, False)
        assert extractor.get_dependencies(Mailer)[0] == ParameterInfo("logger", FileLogger, False)

    def test_declaring_invalidates_cached_parameters(
        self,
        extractor: DependenciesExtractor,
    ) -> None:
        assert extractor.get_dependencies(Untyped)[0].dependency is None

        extractor.declare(f"{__name__}.Untyped", {"logger": Logger})

        assert extractor.get_dependencies(Untyped)[0].dependency is Logger

    def test_declared_dependencies_skip_annotation_evaluation(
        self,
        extractor: DependenciesExtractor,
    ) -> None:
        extractor.declare(ForwardReference, {"logger": Logger})

        assert extractor.get_dependencies(ForwardReference)[0].dependency is Logger

    def test_unevaluable_annotation_raises(self, extractor: DependenciesExtractor) -> None:
        with pytest.raises(UnreflectableClassError) as exc_info:
            extractor.get_dependencies(ForwardReference)

        assert exc_info.value.identifier == identifier_name(ForwardReference)
        assert isinstance(exc_info.value.error, NameError)

    def test_parameters_are_cached(self, extractor: DependenciesExtractor) -> None:
        assert extractor.get_dependencies(Mailer) is extractor.get_dependencies(Mailer)


class TestIdentifiers:
    def test_class_name_is_dotted_path(self) -> None:
        assert identifier_name(ServiceContainer) == "serviceweave.container.ServiceContainer"
        assert identifier_name(Outer.Inner) == f"{__name__}.Outer.Inner"
        assert identifier_name("  app.Mailer ") == "app.Mailer"

    def test_class_is_its_own_key(self) -> None:
        assert identifier_key(Logger) is Logger

    def test_import_path_is_keyed_by_its_class(self) -> None:
        assert identifier_key(" serviceweave.container.ServiceContainer") is ServiceContainer

    @pytest.mark.parametrize("path", ["  app.Mailer ", "serviceweave.injector.GLOBAL_ARGUMENTS"])
    def test_virtual_identifier_is_keyed_by_its_text(self, path: str) -> None:
        assert identifier_key(path) == path.strip()

    def test_same_named_classes_have_distinct_keys(self) -> None:
        first = type("Named", (), {})
        second = type("Named", (), {})

        assert identifier_name(first) == identifier_name(second)
        assert identifier_key(first) != identifier_key(second)

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (Logger, True),
            ("app.Mailer", True),
            ("", False),
            ("   ", False),
            (42, False),
            (None, False),
            (Logger(), False),
            (list[int], False),
        ],
    )
    def test_is_identifier(self, value: object, expected: bool) -> None:
        assert is_identifier(value) is expected

    def test_load_class_returns_classes_unchanged(self) -> None:
        assert load_class(Logger) is Logger

    @pytest.mark.parametrize(
        ("path", "expected"),
        [
            ("serviceweave.host.EventHost", EventHost),
            (f"{__name__}.Outer.Inner", Outer.Inner),
        ],
    )
    def test_load_class_imports_paths(self, path: str, expected: type) -> None:
        assert load_class(path) is expected

    @pytest.mark.parametrize(
        "path",
        ["serviceweave_missing.Mailer", "serviceweave.host.Missing", "Mailer"],
    )
    def test_load_class_unknown_path_raises(self, path: str) -> None:
        with pytest.raises(UnreflectableClassError):
            load_class(path)

    def test_load_class_non_class_raises(self) -> None:
        with pytest.raises(InvalidReflectionError) as exc_info:
            load_class("serviceweave.injector.GLOBAL_ARGUMENTS")

        assert exc_info.value.reflected == "__global__"


class TestTypeChecks:
    @pytest.mark.parametrize(
        "annotation",
        [int, str, dict, list[int], Optional[Logger], object, type, EventHost.__init__],
    )
    def test_builtin_annotations(self, annotation: object) -> None:
        assert is_builtin_annotation(annotation)

    def test_class_annotations(self) -> None:
        assert not is_builtin_annotation(Logger)

    def test_instantiable(self) -> None:
        assert is_instantiable(Logger)
        assert not is_instantiable(Reader)

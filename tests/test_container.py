import pytest

from serviceweave.container import LazyService, ServiceContainer
from serviceweave.exceptions import ServiceError, ServiceNotFoundError


def test_put_and_get(container: ServiceContainer) -> None:
    service = object()
    container.put("mailer", service)

    assert container.has("mailer")
    assert "mailer" in container
    assert container.get("mailer") is service


def test_get_unknown_id_raises(container: ServiceContainer) -> None:
    with pytest.raises(ServiceNotFoundError) as exc_info:
        container.get("unknown")

    assert exc_info.value.service_id == "unknown"
    assert isinstance(exc_info.value, ServiceError)
    assert "cannot be retrieved" in str(exc_info.value)


def test_count_and_len(container: ServiceContainer) -> None:
    assert container.count() == 0

    container.put("a", object())
    container.put("b", object())

    assert container.count() == 2
    assert len(container) == 2


def test_iterates_in_insertion_order(container: ServiceContainer) -> None:
    first, second, third = object(), object(), object()
    container.put("first", first)
    container.put("second", second)
    container.put("third", third)

    assert list(container) == [first, second, third]
    assert container.ids() == ["first", "second", "third"]


def test_replacing_keeps_position(container: ServiceContainer) -> None:
    replacement = object()
    container.put("a", object())
    container.put("b", object())
    container.put("a", replacement)

    assert container.ids() == ["a", "b"]
    assert container.get("a") is replacement


def test_lazy_service_is_built_once_on_first_get(container: ServiceContainer) -> None:
    calls: list[int] = []

    def build() -> object:
        calls.append(1)
        return object()

    container.put("lazy", LazyService(build))

    assert calls == []
    service = container.get("lazy")
    assert container.get("lazy") is service
    assert calls == [1]


def test_iteration_builds_lazy_services(container: ServiceContainer) -> None:
    built = object()
    container.put("lazy", LazyService(lambda: built))

    assert list(container) == [built]

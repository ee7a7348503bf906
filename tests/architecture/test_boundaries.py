from pytest_archon import archrule


def test_core_independence() -> None:
    """
    Core must not import any backend adapter package.
    It is the foundation and must remain backend-agnostic.
    """
    (
        archrule("core_is_independent")
        .match("rawql_core*")
        .should_not_import("rawql_persistence_mongo*")
        .should_not_import("motor*")
        .should_not_import("pymongo*")
        .should_not_import("bson*")
        .check("rawql_core")
    )


def test_request_model_isolation() -> None:
    """
    The request/response model is plain data.
    It must not import the engine, adapters or middleware.
    """
    (
        archrule("request_model_isolation")
        .match(
            "rawql_core.request",
            "rawql_core.response",
            "rawql_core.filters",
            "rawql_core.pipeline",
        )
        .should_not_import("rawql_core.engine")
        .should_not_import("rawql_core.adapters*")
        .should_not_import("rawql_core.middleware*")
        .check("rawql_core")
    )


def test_ports_do_not_import_implementations() -> None:
    """
    Ports define protocols only; implementations depend on them, not the reverse.
    """
    (
        archrule("ports_are_abstract")
        .match("rawql_core.ports*")
        .should_not_import("rawql_core.adapters*")
        .should_not_import("rawql_core.middleware*")
        .should_not_import("rawql_core.engine")
        .check("rawql_core")
    )

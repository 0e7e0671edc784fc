"""Architecture tests using pytest-archon.

These tests enforce DDD architectural boundaries between layers
within the access bounded context and the shared kernel.
"""

from pytest_archon import archrule


class TestAccessDomainLayerBoundaries:
    """Tests that the domain layer has no forbidden dependencies."""

    def test_domain_does_not_import_application(self):
        (
            archrule("domain_no_application")
            .match("access.domain*")
            .should_not_import("access.application*")
            .check("access")
        )

    def test_domain_does_not_import_infrastructure(self):
        (
            archrule("domain_no_infrastructure")
            .match("access.domain*")
            .should_not_import("access.infrastructure*", "infrastructure*", "httpx*")
            .check("access")
        )

    def test_domain_does_not_import_fastapi(self):
        """Domain objects should be framework-agnostic."""
        (
            archrule("domain_no_fastapi")
            .match("access.domain*")
            .should_not_import("fastapi*", "starlette*")
            .check("access")
        )


class TestAccessPortsLayerBoundaries:
    """Tests that the ports layer has no forbidden dependencies."""

    def test_ports_does_not_import_infrastructure(self):
        """Ports define capabilities; they do not know their implementations."""
        (
            archrule("ports_no_infrastructure")
            .match("access.ports*")
            .should_not_import("access.infrastructure*")
            .check("access")
        )

    def test_ports_does_not_import_application(self):
        (
            archrule("ports_no_application")
            .match("access.ports*")
            .should_not_import("access.application*")
            .check("access")
        )


class TestAccessApplicationLayerBoundaries:
    """Tests that application services depend on ports, not adapters."""

    def test_application_does_not_import_infrastructure(self):
        """Services receive the store and host capabilities by injection.

        Only the protocol and the in-process model types are imported; the
        OpenFGA client is wired in by ``access.dependencies``.
        """
        (
            archrule("application_no_infrastructure")
            .match("access.application*")
            .should_not_import(
                "access.infrastructure*",
                "infrastructure*",
                "shared_kernel.authorization.openfga*",
                "httpx*",
            )
            .check("access")
        )

    def test_application_does_not_import_fastapi(self):
        (
            archrule("application_no_fastapi")
            .match("access.application*")
            .should_not_import("fastapi*", "starlette*")
            .check("access")
        )


class TestSharedKernelBoundaries:
    """Tests that the shared kernel stays independent of bounded contexts."""

    def test_shared_kernel_does_not_import_access(self):
        (
            archrule("shared_kernel_no_access")
            .match("shared_kernel*")
            .should_not_import("access*", "infrastructure*")
            .check("shared_kernel")
        )

    def test_shared_kernel_does_not_import_fastapi(self):
        (
            archrule("shared_kernel_no_fastapi")
            .match("shared_kernel*")
            .should_not_import("fastapi*", "starlette*")
            .check("shared_kernel")
        )

def test_public_imports() -> None:
    # A lightweight contract test: keep the most common imports stable.
    import mctpy

    assert hasattr(mctpy, "__version__")

    from mctpy import (  # noqa: F401
        Config,
        MemoryEquation,
        ModeCouplingKernel,
        MSDModeCouplingKernel,
        TaggedModeCouplingKernel,
        Trajectory,
        WavenumberGrid,
    )

import dwas
import dwas.predefined

OLDEST_SUPPORTED_PYTHON = "3.9"
SUPPORTED_PYTHONS = ["3.9", "3.10", "3.11"]
PYTHON_FILES = ["src/", "tests/", "dwasfile.py"]


##
# Formatting
##
dwas.register_managed_step(dwas.predefined.isort(files=PYTHON_FILES))
dwas.register_managed_step(dwas.predefined.black())

# With auto fix
dwas.register_managed_step(
    dwas.predefined.isort(
        additional_arguments=["--atomic"], files=PYTHON_FILES
    ),
    name="isort:fix",
    run_by_default=False,
)
dwas.register_managed_step(
    dwas.predefined.black(additional_arguments=[]),
    name="black:fix",
    requires=["isort:fix"],
    run_by_default=False,
)
dwas.register_step_group(
    name="fix",
    description="Fix all auto-fixable issues on the project",
    requires=["isort:fix", "black:fix"],
    run_by_default=False,
)


##
# Linting
##
dwas.register_managed_step(
    dwas.predefined.mypy(files=PYTHON_FILES),
    dependencies=["mypy", "types-colorama", ".[test]"],
    python=OLDEST_SUPPORTED_PYTHON,
)
dwas.register_managed_step(
    dwas.predefined.pylint(files=["src", "tests"]),
    dependencies=[".[test]", "pylint"],
    python=OLDEST_SUPPORTED_PYTHON,
)
dwas.register_step_group(
    "lint", ["mypy", "pylint"], description="Run linter on the project"
)

##
# Packaging
##
dwas.register_managed_step(
    dwas.predefined.package(isolate=False),
    dependencies=["build", "setuptools>=61.0.0", "wheel"],
)

##
# Testing
##
dwas.register_managed_step(
    dwas.parametrize("python", SUPPORTED_PYTHONS)(dwas.predefined.pytest()),
    dependencies=["pytest"],
    requires=["package"],
    description="Run tests for all supported python versions",
)

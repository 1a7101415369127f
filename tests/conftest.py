pytest_plugins = [
    "tests.fixtures.mocked_aws",
    "tests.fixtures.store_fixtures",
    "tests.fixtures.app_fixtures",
]

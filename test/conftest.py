def pytest_configure(config):
    config.addinivalue_line("markers", "slow: long simulated runs, deselect with -m 'not slow'")

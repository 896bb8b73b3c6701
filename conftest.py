# Root conftest: puts the checkout on sys.path so the flat packages import in tests.

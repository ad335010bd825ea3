from setuptools import setup

setup(
    name="hostfetch",
    version="1.0",
    py_modules=["main", "i18n", "errors", "raw_sources", "providers", "memory", "report", "output"],
    data_files=[("locales", ["locales/en.json"])],
    install_requires=[
        "rich",
        "requests",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "hostfetch=main:main",
        ],
    },
)

from setuptools import setup, find_packages

setup(
    name="questionnaire_export",
    version="0.1.0",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    package_data={"questionnaire_export.business_rules": ["*.json"]},
    install_requires=[
        "pydantic>=2.0.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
            "lxml>=4.9",
        ],
    },
    python_requires=">=3.9",
)

from setuptools import setup, find_packages

setup(
    name="form-validation-lib",
    version="0.1.0",
    description="Rule-based validation for form and request data with custom rules and localized messages",
    packages=find_packages(exclude=["tests", "tests.*"]),
    package_data={
        'form_validation': ['local-config.yaml', 'forms.yaml', 'lang/*.yaml'],
    },
    include_package_data=True,
    install_requires=[
        'pyyaml>=6.0',
        'jsonschema>=4.17.0',
        'requests>=2.28.0',
    ],
    extras_require={
        'test': ['pytest>=7.0'],
    },
    entry_points={
        'console_scripts': [
            'form-validation-jsonrpc=form_validation.jsonrpc_server:main',
        ],
    },
    python_requires='>=3.9',
)

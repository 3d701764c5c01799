"""Install the Firebase auth middleware package."""

from setuptools import setup, find_packages

setup(
    name='firebase-auth-middleware',
    version='0.1.0',
    description='WSGI/Flask middleware that verifies Firebase ID tokens',
    packages=find_packages(exclude=['*tests*']),
    python_requires='>=3.8',
    install_requires=[
        "firebase-admin>=6.0",
        "flask>=2.0",
        "werkzeug>=2.0",
        "pytz",
    ],
    extras_require={
        'test': [
            "pytest",
        ],
    },
    zip_safe=False
)

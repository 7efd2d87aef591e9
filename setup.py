"""optscope lives at <https://github.com/optscope/optscope>.

optscope
--------

Scoped option access for editor windows and buffers.

"""
from setuptools import find_packages, setup

about = {}
with open("src/optscope/__about__.py", encoding="utf-8") as fp:
    exec(fp.read(), about)

install_reqs = ["typing-extensions>=4.6"]
tests_reqs = ["pytest>=7"]

readme = open("README.md", encoding="utf-8").read()

history = open("CHANGES", encoding="utf-8").read().replace(".. :changelog:", "")


setup(
    name=about["__title__"],
    version=about["__version__"],
    url=about["__github__"],
    download_url=about["__pypi__"],
    project_urls={
        "Documentation": about["__docs__"],
        "Code": about["__github__"],
        "Issue tracker": about["__tracker__"],
        "Changes": about["__github__"] + "/blob/master/CHANGES",
    },
    license=about["__license__"],
    author=about["__author__"],
    author_email=about["__email__"],
    description=about["__description__"],
    long_description=readme,
    long_description_content_type="text/markdown",
    package_dir={"": "src"},
    packages=find_packages("src"),
    include_package_data=True,
    python_requires=">=3.10",
    install_requires=install_reqs,
    extras_require={"test": tests_reqs},
    entry_points={"pytest11": ["optscope = optscope.pytest_plugin"]},
    zip_safe=False,
    keywords=about["__title__"],
    classifiers=[
        "Development Status :: 3 - Alpha",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Intended Audience :: Developers",
        "Programming Language :: Python",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Programming Language :: Python :: 3.13",
        "Typing :: Typed",
        "Topic :: Text Editors",
        "Topic :: Utilities",
    ],
)

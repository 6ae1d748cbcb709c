from setuptools import Command, find_namespace_packages, setup

from collections import defaultdict

cmdclass = {}


class CleanCommand(Command):
    def run(self) -> None:
        raise NotImplementedError("Use git clean -xfd instead")

    def initialize_options(self) -> None:
        pass

    def finalize_options(self) -> None:
        pass


cmdclass["clean"] = CleanCommand

with open("README.md") as readme:
    description = readme.read()

package_data = defaultdict(list)
package_data["garchmle"].append("py.typed")

install_requires = [
    "numpy>=1.22",
    "scipy>=1.8",
    "pandas>=1.4",
    "statsmodels>=0.13",
]
extras_require = {"test": ["pytest>=7"]}


setup(
    name="garchmle",
    version="0.1.0",
    description="Maximum likelihood estimation of GARCH-family models",
    long_description=description,
    long_description_content_type="text/markdown",
    packages=find_namespace_packages(include=["garchmle", "garchmle.*"]),
    package_dir={"garchmle": "./garchmle"},
    cmdclass=cmdclass,
    zip_safe=False,
    include_package_data=False,
    package_data=package_data,
    python_requires=">=3.10",
    install_requires=install_requires,
    extras_require=extras_require,
)

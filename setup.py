#!/usr/bin/env python
#-*- coding:utf-8 -*-

from setuptools import setup, find_packages

setup(
	name = "vsem",
	version = "0.1.0",
	keywords = ("Ecosystem model, carbon cycle, Bayesian calibration"),
	description = "Very Simple Ecosystem Model (VSEM) with likelihood and calibration tools",
	long_description = "Very Simple Ecosystem Model (VSEM) with likelihood and calibration tools",
	license = "MIT Licence",

	packages = find_packages(exclude = ["tests", "tests.*"]),
	include_package_data = True,
    package_data={
        "vsem": ["model_parameters/*.csv"],
    },
	platforms = "any",
	python_requires = ">=3.9",
	install_requires=[
		"numpy",
		"scipy",
		"pandas",
		"xarray",
		"tqdm",
	],
	extras_require={
		"test": ["pytest"],
	},
)

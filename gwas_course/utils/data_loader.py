#!/usr/bin/env python3
"""
Tabular data loading for phenotype, genotype and plot-ready SNP tables
Author: Dr. Vijay Singh
Email: vijay.s.gautam@gmail.com

Files are read whole or not at all: a missing file, an empty file or a row
whose field count differs from the header stops the load.
"""

import os
import csv
import logging

import pandas as pd

from gwas_course.utils.exceptions import DataLoadError
from gwas_course.utils.preprocessing import require_columns

logger = logging.getLogger('GWASCourse')

GENOTYPE_MAP_COLUMNS = ['SNP', 'Chromosome', 'Position']
MANHATTAN_COLUMNS = ['SNP', 'Chromosome', 'Position', 'P.value']


def _check_field_counts(file_path, sep):
    """Raise DataLoadError if any non-blank row has a different width than the header"""
    with open(file_path, 'r', newline='') as f:
        reader = csv.reader(f, delimiter=sep)
        expected = None
        for line_number, row in enumerate(reader, start=1):
            if not row:
                continue
            if expected is None:
                expected = len(row)
            elif len(row) != expected:
                raise DataLoadError(
                    f"Malformed table {file_path}: line {line_number} has {len(row)} "
                    f"fields, header has {expected}"
                )
    if expected is None:
        raise DataLoadError(f"Table is empty: {file_path}")


def load_table(file_path, required_columns=None, sep=','):
    """Load a delimited table, inferring numeric vs. text columns from content"""
    file_path = str(file_path)
    logger.info(f"📊 Loading table: {file_path}")

    if not os.path.exists(file_path):
        logger.error(f"❌ File not found: {file_path}")
        raise DataLoadError(f"File not found: {file_path}")

    try:
        _check_field_counts(file_path, sep)
        df = pd.read_csv(file_path, sep=sep, na_values=['NA', 'NaN', ''],
                         keep_default_na=True)
    except DataLoadError as e:
        logger.error(f"❌ {e}")
        raise
    except (OSError, UnicodeDecodeError, pd.errors.ParserError, pd.errors.EmptyDataError) as e:
        logger.error(f"❌ Could not read {file_path}: {e}")
        raise DataLoadError(f"Could not read {file_path}: {e}") from e

    if required_columns:
        require_columns(df, required_columns, os.path.basename(file_path))

    logger.info(f"✅ Loaded {os.path.basename(file_path)}: {df.shape[0]} rows x {df.shape[1]} columns")
    return df


def load_phenotypes(file_path, id_column='Taxa', group_column='Group', trait_columns=None):
    """Load the phenotype table: one row per individual"""
    required = [id_column, group_column] + list(trait_columns or [])
    df = load_table(file_path, required_columns=required)

    for trait in trait_columns or []:
        if not pd.api.types.is_numeric_dtype(df[trait]):
            raise DataLoadError(f"Trait column '{trait}' in {file_path} is not numeric")

    return df


def load_genotypes(file_path):
    """Load the genotype table: marker map columns followed by one dosage column per individual"""
    df = load_table(file_path, required_columns=GENOTYPE_MAP_COLUMNS)

    sample_columns = [c for c in df.columns if c not in GENOTYPE_MAP_COLUMNS]
    if not sample_columns:
        raise DataLoadError(f"Genotype table {file_path} has no individual columns")

    non_numeric = [c for c in sample_columns if not pd.api.types.is_numeric_dtype(df[c])]
    if non_numeric:
        raise DataLoadError(
            f"Genotype calls must be numeric allele dosages; non-numeric columns: {non_numeric[:5]}"
        )

    logger.info(f"🧬 Genotypes: {len(df)} markers, {len(sample_columns)} individuals")
    return df


def load_manhattan_data(file_path):
    """Load a plot-ready SNP table (SNP, Chromosome, Position, P.value)"""
    return load_table(file_path, required_columns=MANHATTAN_COLUMNS)


def genotype_sample_columns(genotypes):
    """Individual identifiers of a genotype table, in column order"""
    return [c for c in genotypes.columns if c not in GENOTYPE_MAP_COLUMNS]

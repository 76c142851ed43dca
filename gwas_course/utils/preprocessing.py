#!/usr/bin/env python3
"""
Phenotype preprocessing: missing-value filtering, categorical coercion,
grouped means and pairwise correlation.

Every function returns a new object and leaves its input table untouched.
"""

import logging
from typing import Dict, List, Optional

import numpy as np
import pandas as pd
from scipy import stats

from gwas_course.utils.exceptions import ValidationError

logger = logging.getLogger('GWASCourse')


def require_columns(table: pd.DataFrame, columns: List[str], context: str = "table"):
    """Raise ValidationError if any of the columns is absent"""
    missing = [c for c in columns if c not in table.columns]
    if missing:
        logger.error(f"❌ {context}: missing required columns {missing}")
        raise ValidationError(
            f"{context}: missing required columns {missing}; available: {list(table.columns)}"
        )


def drop_missing(table: pd.DataFrame, column: str) -> pd.DataFrame:
    """Rows of table where column is present"""
    require_columns(table, [column], "drop_missing")
    cleaned = table[table[column].notna()].copy()
    dropped = len(table) - len(cleaned)
    if dropped:
        logger.info(f"🧹 Dropped {dropped} rows with missing '{column}'")
    return cleaned


def as_category(table: pd.DataFrame, column: str) -> pd.DataFrame:
    """Copy of table with column coerced to a categorical dtype"""
    require_columns(table, [column], "as_category")
    result = table.copy()
    result[column] = result[column].astype('category')
    logger.debug(f"🏷️ '{column}' has {len(result[column].cat.categories)} categories")
    return result


def group_mean(table: pd.DataFrame, group_column: str, value_column: str) -> Dict:
    """Mean of value_column per distinct value of group_column, ignoring missing values"""
    require_columns(table, [group_column, value_column], "group_mean")
    if not pd.api.types.is_numeric_dtype(table[value_column]):
        raise ValidationError(f"group_mean: '{value_column}' is not numeric")

    present = table[table[value_column].notna()]
    if present.empty:
        raise ValidationError(f"group_mean: '{value_column}' has no usable values")

    unlabelled = int(present[group_column].isna().sum())
    if unlabelled:
        logger.error(f"❌ group_mean: {unlabelled} rows with '{value_column}' have no '{group_column}'")
        raise ValidationError(
            f"group_mean: {unlabelled} rows with a '{value_column}' value are missing "
            f"'{group_column}'; drop them first with drop_missing"
        )

    # observed=True keeps unused categorical levels out of the result
    means = present.groupby(group_column, observed=True)[value_column].mean()
    return {group: float(mean) for group, mean in means.items()}


def correlation(table: pd.DataFrame, column_a: str, column_b: str) -> float:
    """Pearson correlation over complete cases of column_a and column_b"""
    require_columns(table, [column_a, column_b], "correlation")
    for column in (column_a, column_b):
        if not pd.api.types.is_numeric_dtype(table[column]):
            logger.error(f"❌ correlation: '{column}' is not numeric")
            raise ValidationError(f"correlation: '{column}' is not numeric")

    complete = table[[column_a, column_b]].dropna()
    if len(complete) < 2:
        logger.error(f"❌ correlation: fewer than two complete rows for '{column_a}', '{column_b}'")
        raise ValidationError(
            f"correlation needs at least two complete rows, found {len(complete)}"
        )

    a = complete.iloc[:, 0].astype(float).to_numpy()
    b = complete.iloc[:, 1].astype(float).to_numpy()
    if np.ptp(a) == 0 or np.ptp(b) == 0:
        raise ValidationError("correlation is undefined for a constant column")

    r, p_value = stats.pearsonr(a, b)
    logger.info(f"🔗 Pearson r({column_a}, {column_b}) = {r:.3f} (p = {p_value:.2e}, n = {len(complete)})")
    return float(np.clip(r, -1.0, 1.0))


def clean_phenotypes(table: pd.DataFrame, group_column: str,
                     trait_columns: List[str]) -> pd.DataFrame:
    """Drop rows missing any trait and make the grouping field categorical"""
    cleaned = table
    for trait in trait_columns:
        cleaned = drop_missing(cleaned, trait)
    cleaned = drop_missing(cleaned, group_column)
    cleaned = as_category(cleaned, group_column)
    logger.info(f"✅ Phenotypes cleaned: {len(cleaned)} of {len(table)} individuals kept")
    return cleaned


def summarize_traits(table: pd.DataFrame, group_column: str,
                     trait_columns: Optional[List[str]] = None) -> pd.DataFrame:
    """Per-group count, mean and standard deviation of each trait"""
    if trait_columns is None:
        trait_columns = [c for c in table.columns
                         if c != group_column and pd.api.types.is_numeric_dtype(table[c])]
    require_columns(table, [group_column] + list(trait_columns), "summarize_traits")

    summary = (table.groupby(group_column, observed=True)[trait_columns]
               .agg(['count', 'mean', 'std']))
    return summary

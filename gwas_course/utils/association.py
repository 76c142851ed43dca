#!/usr/bin/env python3
"""
Association testing by delegation to scikit-learn and statsmodels
Author: Dr. Vijay Singh
Email: vijay.s.gautam@gmail.com

The runner only marshals tables in and out. Population-structure covariates
come from sklearn's PCA of the standardised genotype matrix; each marker is
then tested with one statsmodels fit of trait ~ intercept + PCs + marker
(OLS for quantitative traits, Logit for binary ones). Multiple-testing
adjustment is statsmodels' multipletests.
"""

import logging
from pathlib import Path
from typing import Dict, Optional

import numpy as np
import pandas as pd
import statsmodels.api as sm
from scipy import stats
from sklearn.decomposition import PCA
from sklearn.preprocessing import StandardScaler
from statsmodels.stats.multitest import multipletests
from statsmodels.tools.sm_exceptions import PerfectSeparationError

from gwas_course.utils.data_loader import GENOTYPE_MAP_COLUMNS, genotype_sample_columns
from gwas_course.utils.exceptions import AssociationEngineError, ValidationError
from gwas_course.utils.preprocessing import drop_missing, require_columns

logger = logging.getLogger('GWASCourse')

RESULT_COLUMNS = ['SNP', 'Chromosome', 'Position', 'P.value', 'MAF', 'nobs',
                  'effect', 'SE', 'FDR_Adjusted_P']
SUPPORTED_METHODS = ('linear', 'logistic')


class AssociationRunner:
    """Runs a PCA-corrected single-marker association through statsmodels"""

    def __init__(self, config: Optional[Dict] = None):
        config = config or {}
        self.gwas_config = config.get('gwas', {})
        self.analysis_config = config.get('analysis', {})
        self.method = self.gwas_config.get('method', 'linear')
        self.fdr_method = self.gwas_config.get('fdr_method', 'fdr_bh')
        self.id_column = self.analysis_config.get('id_column', 'Taxa')

        if self.method not in SUPPORTED_METHODS:
            raise ValidationError(
                f"Unsupported association method: {self.method} (choose from {SUPPORTED_METHODS})"
            )

    def run(self, phenotypes: pd.DataFrame, genotypes: pd.DataFrame,
            pca_total: int, trait: str) -> pd.DataFrame:
        """Test every polymorphic marker for association with trait"""
        if not isinstance(pca_total, (int, np.integer)) or isinstance(pca_total, bool) or pca_total < 0:
            raise ValidationError(f"pca_total must be a non-negative integer, got {pca_total!r}")

        logger.info(f"🧪 Running {self.method} association for '{trait}' with {pca_total} PCs")

        y, dosage_table = self._marshal_inputs(phenotypes, genotypes, trait)
        dosages, called_counts, marker_means = self._impute_missing_calls(dosage_table)
        allele_freq = marker_means / 2.0
        maf = np.minimum(allele_freq, 1.0 - allele_freq)

        polymorphic = (called_counts > 0) & (np.nan_to_num(dosages.std(axis=0)) > 0)
        n_samples = len(y)
        n_polymorphic = int(polymorphic.sum())
        if n_polymorphic == 0:
            raise AssociationEngineError("No polymorphic markers to test")
        if n_polymorphic < len(polymorphic):
            logger.info(f"🔧 Skipping {len(polymorphic) - n_polymorphic} monomorphic markers")

        if pca_total > min(n_samples - 1, n_polymorphic):
            raise ValidationError(
                f"pca_total={pca_total} exceeds what {n_samples} individuals and "
                f"{n_polymorphic} markers support"
            )
        if n_samples <= pca_total + 2:
            raise AssociationEngineError(
                f"{n_samples} individuals are too few for a model with {pca_total} PCs"
            )

        covariates = self._principal_components(dosages[:, polymorphic], pca_total)
        fits = self._fit_markers(y, covariates, dosages, polymorphic)

        marker_map = genotypes.loc[:, GENOTYPE_MAP_COLUMNS].reset_index(drop=True)
        rows = []
        for index, fit in fits:
            rows.append({
                'SNP': marker_map.at[index, 'SNP'],
                'Chromosome': marker_map.at[index, 'Chromosome'],
                'Position': marker_map.at[index, 'Position'],
                'P.value': fit['p_value'],
                'MAF': float(maf[index]),
                'nobs': int(called_counts[index]),
                'effect': fit['effect'],
                'SE': fit['se']
            })

        if not rows:
            raise AssociationEngineError("Association routine returned no finite p-values")

        results = pd.DataFrame(rows)
        results['FDR_Adjusted_P'] = multipletests(results['P.value'].to_numpy(),
                                                  method=self.fdr_method)[1]
        results = results[RESULT_COLUMNS]

        logger.info(f"✅ Tested {len(results)} markers on {n_samples} individuals; "
                    f"minimum p = {results['P.value'].min():.2e}")
        return results

    def _marshal_inputs(self, phenotypes, genotypes, trait):
        """Trait vector and genotype columns of the phenotyped individuals, in phenotype order"""
        require_columns(phenotypes, [self.id_column, trait], "phenotype table")
        require_columns(genotypes, GENOTYPE_MAP_COLUMNS, "genotype table")

        if not pd.api.types.is_numeric_dtype(phenotypes[trait]):
            raise ValidationError(f"Trait '{trait}' is not numeric")

        phenotyped = drop_missing(phenotypes, trait)
        ids = phenotyped[self.id_column].astype(str).tolist()
        if len(set(ids)) != len(ids):
            raise AssociationEngineError(f"Duplicate individual identifiers in '{self.id_column}'")

        samples = [str(s) for s in genotype_sample_columns(genotypes)]
        sample_set = set(samples)
        absent = [i for i in ids if i not in sample_set]
        if absent:
            logger.error(f"❌ {len(absent)} phenotyped individuals have no genotype column")
            raise AssociationEngineError(
                f"Phenotype and genotype samples are not aligned; missing from genotypes: {absent[:5]}"
            )

        extra = len(samples) - len(ids)
        if extra:
            logger.info(f"ℹ️ {extra} genotyped individuals have no '{trait}' value and are not used")

        dosage_table = genotypes.rename(columns=str).loc[:, ids]
        y = phenotyped[trait].astype(float).to_numpy()

        if self.method == 'logistic':
            levels = set(np.unique(y))
            if levels != {0.0, 1.0}:
                raise AssociationEngineError(
                    f"Logistic association needs a 0/1 trait with both classes; '{trait}' has {sorted(levels)[:5]}"
                )
        elif np.ptp(y) == 0:
            raise AssociationEngineError(f"Trait '{trait}' is constant")

        return y, dosage_table

    @staticmethod
    def _impute_missing_calls(dosage_table):
        """Individuals x markers dosage matrix with missing calls set to the marker mean"""
        dosages = dosage_table.T.to_numpy(dtype=float)
        called = ~np.isnan(dosages)
        called_counts = called.sum(axis=0)
        sums = np.where(called, dosages, 0.0).sum(axis=0)
        means = np.divide(sums, called_counts, out=np.full(dosages.shape[1], np.nan),
                          where=called_counts > 0)
        return np.where(called, dosages, means), called_counts, means

    @staticmethod
    def _principal_components(dosages, pca_total):
        """Leading principal components of the standardised genotypes"""
        if pca_total == 0:
            return np.empty((dosages.shape[0], 0))

        scaled = StandardScaler().fit_transform(dosages)
        pca = PCA(n_components=pca_total)
        components = pca.fit_transform(scaled)
        logger.info(f"📉 {pca_total} PCs explain {pca.explained_variance_ratio_.sum():.1%} "
                    f"of genotype variance")
        return components

    def _fit_markers(self, y, covariates, dosages, polymorphic):
        """One statsmodels fit per polymorphic marker; yields (marker index, estimates)"""
        base = np.column_stack([np.ones(len(y)), covariates])
        fits = []
        skipped = 0

        for index in np.flatnonzero(polymorphic):
            design = np.column_stack([base, dosages[:, index]])
            try:
                if self.method == 'linear':
                    fit = sm.OLS(y, design).fit()
                else:
                    fit = sm.Logit(y, design).fit(disp=0)
            except (np.linalg.LinAlgError, PerfectSeparationError, ValueError) as e:
                logger.error(f"❌ Association routine failed on marker {index}: {e}")
                raise AssociationEngineError(f"Association routine failed: {e}") from e

            p_value = float(fit.pvalues[-1])
            if not np.isfinite(p_value):
                skipped += 1
                continue
            fits.append((index, {
                'p_value': p_value,
                'effect': float(fit.params[-1]),
                'se': float(fit.bse[-1])
            }))

        if skipped:
            logger.warning(f"⚠️ {skipped} markers gave no finite p-value (collinear with PCs)")
        return fits


def run_association(phenotypes, genotypes, pca_total, trait, config=None):
    """Convenience wrapper: build a runner from config and test trait"""
    return AssociationRunner(config).run(phenotypes, genotypes, pca_total, trait)


def calculate_lambda_gc(p_values):
    """Genomic control lambda: median 1-df chi-square over its null median"""
    p_values = np.asarray(p_values, dtype=float)
    p_values = p_values[np.isfinite(p_values) & (p_values > 0) & (p_values <= 1)]
    if len(p_values) == 0:
        raise ValidationError("lambda GC needs at least one p-value in (0, 1]")

    chi_squared = stats.chi2.isf(p_values, 1)
    return float(np.median(chi_squared) / stats.chi2.ppf(0.5, 1))


def save_results(results, output_file):
    """Write an association results table to CSV"""
    output_file = Path(output_file)
    output_file.parent.mkdir(parents=True, exist_ok=True)
    results.to_csv(output_file, index=False)
    logger.info(f"💾 Association results saved: {output_file}")
    return str(output_file)

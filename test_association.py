#!/usr/bin/env python3
"""
GWAS Course - Association Runner Tests
Small synthetic panels with one causal marker
Author: Dr. Vijay Singh
Email: vijay.s.gautam@gmail.com
"""

import sys
import unittest
from pathlib import Path

import numpy as np
import pandas as pd

sys.path.insert(0, str(Path(__file__).parent))

from gwas_course.utils.association import (AssociationRunner, run_association, calculate_lambda_gc,
                                           RESULT_COLUMNS)
from gwas_course.utils.exceptions import AssociationEngineError, ValidationError


def make_dataset(n_individuals=40, n_markers=30, causal=4, effect=5.0, seed=1):
    """Phenotype and genotype tables where Height depends on marker number `causal`"""
    rng = np.random.default_rng(seed)
    taxa = [f"T{i:03d}" for i in range(n_individuals)]

    dosages = rng.binomial(2, 0.35, size=(n_markers, n_individuals)).astype(float)
    # First two individuals fix every marker as polymorphic
    dosages[:, 0] = 0.0
    dosages[:, 1] = 2.0

    genotypes = pd.DataFrame(dosages, columns=taxa)
    genotypes.insert(0, 'SNP', [f"SNP{i:03d}" for i in range(n_markers)])
    genotypes.insert(1, 'Chromosome', [i % 3 + 1 for i in range(n_markers)])
    genotypes.insert(2, 'Position', [(i + 1) * 1000 for i in range(n_markers)])

    height = 100.0 + effect * dosages[causal] + rng.normal(0, 1.0, size=n_individuals)
    phenotypes = pd.DataFrame({
        'Taxa': taxa,
        'Group': [['A', 'B'][i % 2] for i in range(n_individuals)],
        'Height': height
    })
    return phenotypes, genotypes


class TestAssociationRunner(unittest.TestCase):
    """Linear association through statsmodels OLS"""

    def setUp(self):
        self.phenotypes, self.genotypes = make_dataset()
        self.taxa = self.phenotypes['Taxa'].tolist()

    def test_result_table_shape(self):
        """One row per polymorphic marker with the expected columns"""
        results = run_association(self.phenotypes, self.genotypes, 2, 'Height')

        self.assertEqual(list(results.columns), RESULT_COLUMNS)
        self.assertEqual(len(results), len(self.genotypes))
        self.assertEqual(results['SNP'].tolist(), self.genotypes['SNP'].tolist())

    def test_pvalues_and_fdr_in_range(self):
        results = run_association(self.phenotypes, self.genotypes, 2, 'Height')

        self.assertTrue(((results['P.value'] >= 0) & (results['P.value'] <= 1)).all())
        self.assertTrue((results['FDR_Adjusted_P'] >= results['P.value'] - 1e-12).all())
        self.assertTrue((results['FDR_Adjusted_P'] <= 1).all())

    def test_causal_marker_is_top_hit(self):
        results = run_association(self.phenotypes, self.genotypes, 2, 'Height')
        top = results.nsmallest(1, 'P.value').iloc[0]

        self.assertEqual(top['SNP'], 'SNP004')
        self.assertLess(top['P.value'], 1e-6)
        self.assertGreater(top['effect'], 0)

    def test_zero_pcs(self):
        results = run_association(self.phenotypes, self.genotypes, 0, 'Height')
        self.assertEqual(len(results), len(self.genotypes))

    def test_numpy_integer_pca_total_accepted(self):
        results = run_association(self.phenotypes, self.genotypes, np.int64(1), 'Height')
        self.assertEqual(len(results), len(self.genotypes))

    def test_missing_calls_reduce_nobs(self):
        genotypes = self.genotypes.copy()
        genotypes.loc[3, self.taxa[5:10]] = np.nan

        results = run_association(self.phenotypes, genotypes, 2, 'Height')
        nobs = results.set_index('SNP')['nobs']

        self.assertEqual(nobs['SNP003'], len(self.taxa) - 5)
        self.assertEqual(nobs['SNP002'], len(self.taxa))

    def test_monomorphic_marker_not_tested(self):
        constant = pd.DataFrame([['MONO', 1, 99000] + [1.0] * len(self.taxa)],
                                columns=self.genotypes.columns)
        genotypes = pd.concat([self.genotypes, constant], ignore_index=True)

        results = run_association(self.phenotypes, genotypes, 2, 'Height')

        self.assertNotIn('MONO', results['SNP'].tolist())
        self.assertEqual(len(results), len(self.genotypes))

    def test_individuals_missing_trait_are_dropped(self):
        phenotypes = self.phenotypes.copy()
        phenotypes.loc[[10, 11], 'Height'] = np.nan

        results = run_association(phenotypes, self.genotypes, 2, 'Height')
        self.assertTrue((results['nobs'] == len(self.taxa) - 2).all())

    def test_extra_genotyped_individuals_ignored(self):
        results = run_association(self.phenotypes.iloc[1:], self.genotypes, 2, 'Height')
        self.assertTrue((results['nobs'] == len(self.taxa) - 1).all())

    def test_phenotyped_individual_without_genotypes(self):
        phenotypes = self.phenotypes.copy()
        phenotypes.loc[0, 'Taxa'] = 'NOT_GENOTYPED'

        with self.assertRaises(AssociationEngineError):
            run_association(phenotypes, self.genotypes, 2, 'Height')

    def test_duplicate_identifiers(self):
        phenotypes = self.phenotypes.copy()
        phenotypes.loc[1, 'Taxa'] = phenotypes.loc[0, 'Taxa']

        with self.assertRaises(AssociationEngineError):
            run_association(phenotypes, self.genotypes, 2, 'Height')

    def test_invalid_pca_total(self):
        for pca_total in (-1, 2.5, True, '3'):
            with self.subTest(pca_total=pca_total):
                with self.assertRaises(ValidationError):
                    run_association(self.phenotypes, self.genotypes, pca_total, 'Height')

    def test_pca_total_larger_than_data_supports(self):
        with self.assertRaises(ValidationError):
            run_association(self.phenotypes, self.genotypes, 31, 'Height')

    def test_too_few_individuals(self):
        phenotypes, genotypes = make_dataset(n_individuals=4, n_markers=10)
        with self.assertRaises(AssociationEngineError):
            run_association(phenotypes, genotypes, 2, 'Height')

    def test_constant_trait(self):
        phenotypes = self.phenotypes.copy()
        phenotypes['Height'] = 120.0
        with self.assertRaises(AssociationEngineError):
            run_association(phenotypes, self.genotypes, 2, 'Height')

    def test_non_numeric_trait(self):
        with self.assertRaises(ValidationError):
            run_association(self.phenotypes, self.genotypes, 2, 'Group')

    def test_missing_trait_column(self):
        with self.assertRaises(ValidationError):
            run_association(self.phenotypes, self.genotypes, 2, 'Yield')

    def test_unsupported_method(self):
        with self.assertRaises(ValidationError):
            AssociationRunner({'gwas': {'method': 'mixed_model'}})

    def test_inputs_not_modified(self):
        phenotypes = self.phenotypes.copy()
        genotypes = self.genotypes.copy()
        run_association(phenotypes, genotypes, 2, 'Height')

        pd.testing.assert_frame_equal(phenotypes, self.phenotypes)
        pd.testing.assert_frame_equal(genotypes, self.genotypes)


class TestLogisticAssociation(unittest.TestCase):
    """Binary traits through statsmodels Logit"""

    def setUp(self):
        self.config = {'gwas': {'method': 'logistic'}}
        self.phenotypes, self.genotypes = make_dataset(n_individuals=150, seed=7)

    def test_binary_trait(self):
        rng = np.random.default_rng(3)
        causal = self.genotypes.iloc[4][self.phenotypes['Taxa']].to_numpy(dtype=float)
        liability = 2.0 * (causal - causal.mean()) + rng.logistic(size=len(causal))
        phenotypes = self.phenotypes.copy()
        phenotypes['Case'] = (liability > 0).astype(int)

        results = run_association(phenotypes, self.genotypes, 1, 'Case', self.config)

        self.assertEqual(list(results.columns), RESULT_COLUMNS)
        self.assertTrue(((results['P.value'] > 0) & (results['P.value'] <= 1)).all())
        self.assertLess(results.set_index('SNP').at['SNP004', 'P.value'], 0.01)

    def test_non_binary_trait_rejected(self):
        with self.assertRaises(AssociationEngineError):
            run_association(self.phenotypes, self.genotypes, 1, 'Height', self.config)


class TestLambdaGC(unittest.TestCase):

    def test_uniform_pvalues_give_lambda_near_one(self):
        n = 2000
        p_values = (np.arange(1, n + 1) - 0.5) / n
        self.assertAlmostEqual(calculate_lambda_gc(p_values), 1.0, delta=0.01)

    def test_inflated_pvalues(self):
        n = 2000
        p_values = ((np.arange(1, n + 1) - 0.5) / n) ** 2
        self.assertGreater(calculate_lambda_gc(p_values), 1.5)

    def test_no_valid_pvalues(self):
        with self.assertRaises(ValidationError):
            calculate_lambda_gc([np.nan, 0.0, 2.0])


if __name__ == "__main__":
    unittest.main(verbosity=2)

import unittest
import os
import tempfile
import numpy as np
import pandas as pd
import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt

from utilsControls import get_excitation_phases, get_excitation_values
from utilsPlotting import plot_dataframe, plot_excitations


class TestPlotDataframe(unittest.TestCase):
    def setUp(self):
        time = np.linspace(0, 0.2, 21)
        self.states = pd.DataFrame({'time': time,
                                    'knee_angle_r': -30 * time,
                                    'knee_adduction_r': 0 * time,
                                    'knee_rotation_r': 2 * time})

    def tearDown(self):
        plt.close('all')

    def test_all_columns(self):
        with tempfile.TemporaryDirectory() as temp_dir:
            savePath = os.path.join(temp_dir, 'states.png')
            fig = plot_dataframe([self.states, self.states],
                                 labels=['flex', 'ext'], title='States',
                                 savePath=savePath, show=False)
            self.assertTrue(os.path.exists(savePath))
        visible = [ax for ax in fig.axes if ax.get_visible()]
        self.assertEqual(len(fig.axes), 4)
        self.assertEqual(len(visible), 3)

    def test_single_column(self):
        fig = plot_dataframe([self.states], y=['knee_angle_r'],
                             xlabel='Time (s)', show=False)
        self.assertEqual(len(fig.axes), 1)
        self.assertEqual(fig.axes[0].get_ylabel(), 'knee_angle_r')

    def test_no_columns(self):
        with self.assertRaises(ValueError):
            plot_dataframe([self.states[['time']]], show=False)


class TestPlotExcitations(unittest.TestCase):
    def tearDown(self):
        plt.close('all')

    def test_plot_excitations(self):
        phases, duration = get_excitation_phases(-1.0)
        values = get_excitation_values([0.1, 0.0], [0.3, 0.2])
        with tempfile.TemporaryDirectory() as temp_dir:
            savePath = os.path.join(temp_dir, 'excitations.png')
            fig = plot_excitations(phases, values, duration,
                                   names=['bifemlh_r', 'vas_lat_r'],
                                   savePath=savePath, show=False)
            self.assertTrue(os.path.exists(savePath))
        self.assertEqual(len(fig.axes[0].get_legend().get_texts()), 2)

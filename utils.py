'''
    ---------------------------------------------------------------------------
    Knee simulations: utils.py
    ---------------------------------------------------------------------------

    Copyright 2022 the Authors

    Licensed under the Apache License, Version 2.0 (the "License"); you may not
    use this file except in compliance with the License. You may obtain a copy
    of the License at http://www.apache.org/licenses/LICENSE-2.0

    Unless required by applicable law or agreed to in writing, software
    distributed under the License is distributed on an "AS IS" BASIS,
    WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
    See the License for the specific language governing permissions and
    limitations under the License.
'''

import os
import logging
import numpy as np
import pandas as pd
import yaml
from scipy import signal

# %% Logging.
def setup_logging(logPath):

    os.makedirs(os.path.dirname(os.path.abspath(logPath)), exist_ok=True)
    if os.path.exists(logPath):
        os.remove(logPath)
    # Remove all handlers associated with the root logger object.
    for handler in logging.root.handlers[:]:
        logging.root.removeHandler(handler)
    logging.shutdown()
    logging.basicConfig(filename=logPath,format='%(message)s',
                        level=logging.INFO)

def print_and_log(outputStr):
    print(outputStr)
    logging.info(outputStr)

# %% Settings.
def import_settings(filePath):
    if not os.path.exists(filePath):
        raise FileNotFoundError(filePath)
    with open(filePath) as myYamlFile:
        parsedYamlFile = yaml.load(myYamlFile, Loader=yaml.FullLoader)
    if parsedYamlFile is None:
        parsedYamlFile = {}
    if not isinstance(parsedYamlFile, dict):
        raise ValueError('Settings file {} does not contain a mapping.'.format(
            filePath))

    return parsedYamlFile

def dump_settings(settings, filePath):
    os.makedirs(os.path.dirname(os.path.abspath(filePath)), exist_ok=True)
    with open(filePath, 'w') as file:
        yaml.dump(settings, file)

# %% Paths.
def format_angle(angle):
    # -90.0 -> '-90', -1.5 -> '-1.5'
    return '{:g}'.format(angle)

def get_output_path(outputDir, fileName, case=None):
    if case is not None:
        fileName = fileName.format(case)
    os.makedirs(outputDir, exist_ok=True)

    return os.path.join(outputDir, fileName)

# %% Filtering.
def lowPassFilter(time, data, lowpass_cutoff_frequency, order=4):

    fs = 1/np.round(np.mean(np.diff(time)),16)
    wn = lowpass_cutoff_frequency/(fs/2)
    sos = signal.butter(order//2, wn, btype='low', output='sos')
    dataFilt = signal.sosfiltfilt(sos, data, axis=0)

    return dataFilt

# %%  Storage file to numpy array.
def storage_to_numpy(storage_file, excess_header_entries=0):
    """Returns the data from a storage file in a numpy format. Skips all lines
    up to and including the line that says 'endheader'.
    Parameters
    ----------
    storage_file : str
        Path to an OpenSim Storage (.sto) file.
    excess_header_entries : int, optional
        If the header row has more names in it than there are data columns.
        We'll ignore this many header row entries from the end of the header
        row. This argument allows for a hacky fix to an issue that arises from
        Static Optimization '.sto' outputs.
    Returns
    -------
    data : np.ndarray
        Structured array with all columns from the storage file, indexable by
        column name.
    Examples
    --------
    Columns from the storage file can be obtained as follows:
        >>> data = storage_to_numpy('<filename>')
        >>> data['knee_angle_r']
    """
    # What's the line number of the line containing 'endheader'?
    line_number_of_line_containing_endheader = None
    column_names = []
    with open(storage_file, 'r') as f:
        header_line = False
        for i, line in enumerate(f):
            if header_line:
                column_names = line.split()
                break
            if line.count('endheader') != 0:
                line_number_of_line_containing_endheader = i + 1
                header_line = True
    if line_number_of_line_containing_endheader is None:
        raise ValueError('No endheader line in {}.'.format(storage_file))

    # With this information, go get the data.
    if excess_header_entries == 0:
        names = column_names
    else:
        names = column_names[:-excess_header_entries]
    data = np.genfromtxt(storage_file, names=names, deletechars='',
                         skip_header=line_number_of_line_containing_endheader + 1)

    return data

# %%  Storage file to dataframe.
def storage_to_dataframe(storage_file, headers=None):
    # Extract data
    data = storage_to_numpy(storage_file)
    if headers is None:
        headers = [name for name in data.dtype.names if name != 'time']
    out = pd.DataFrame(data=np.atleast_1d(data['time']), columns=['time'])
    for count, header in enumerate(headers):
        out.insert(count + 1, header, np.atleast_1d(data[header]))

    return out

# %%  Numpy array to storage file.
def numpy_to_storage(labels, data, storage_file, datatype=None):

    data = np.atleast_2d(data)
    if data.shape[1] != len(labels):
        raise ValueError("# labels doesn't match columns")
    if labels[0] != "time":
        raise ValueError("First label should be time")

    with open(storage_file, 'w') as f:
        # Old style
        if datatype is None:
            f.write('name %s\n' %storage_file)
            f.write('datacolumns %d\n' %data.shape[1])
            f.write('datarows %d\n' %data.shape[0])
            f.write('range %f %f\n' %(np.min(data[:, 0]), np.max(data[:, 0])))
            f.write('endheader \n')
        # New style
        else:
            if datatype == 'excitations':
                f.write('Excitations\n')
            elif datatype == 'ID':
                f.write('Inverse Dynamics Generalized Forces\n')
            elif datatype == 'knee_loading':
                f.write('KneeLoading\n')
            elif datatype == 'GRF':
                f.write('%s\n' %storage_file)
            else:
                raise ValueError('Unknown storage datatype {}'.format(datatype))
            f.write('version=1\n')
            f.write('nRows=%d\n' %data.shape[0])
            f.write('nColumns=%d\n' %data.shape[1])
            if datatype == 'excitations':
                f.write('inDegrees=no\n\n')
                f.write('This file contains actuator excitations (controls) against time.\n\n')
            elif datatype == 'ID':
                f.write('inDegrees=no\n')
            elif datatype == 'GRF':
                f.write('inDegrees=yes\n')
            elif datatype == 'knee_loading':
                f.write('inDegrees=no\n\n')
                f.write('Units are S.I. units (second, meters, Newtons, ...)\n')
                f.write('Angles are in radians.\n\n')
            f.write('endheader \n')

        for i in range(len(labels)):
            f.write('%s\t' %labels[i])
        f.write('\n')

        for i in range(data.shape[0]):
            for j in range(data.shape[1]):
                f.write('%20.8f\t' %data[i, j])
            f.write('\n')

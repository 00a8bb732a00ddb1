import yaml
from enum import Enum
from pathlib import Path
import logging
import os

logger = logging.getLogger(__name__)

CONFIG_TYPE = Enum("CONFIG_TYPE", 'STORE')


class Config:
    def __init__(self, config_file):
        self.config_file = config_file
        self.experiment_dir = str(Path(config_file).parent.resolve())
        self.log_dir = self.experiment_dir + "/logs/"

        # setup the experiment directory structure
        Path(self.log_dir).mkdir(parents=True, exist_ok=True)

        # logging
        self.log_file = self.log_dir + 'main.log'
        package_logger = logging.getLogger("markerseq")
        log_path = os.path.abspath(self.log_file)
        # one handler per log file, however many times the config is loaded
        if not any(isinstance(h, logging.FileHandler) and h.baseFilename == log_path for h in package_logger.handlers):
            handler = logging.FileHandler(self.log_file, mode='w')
            handler.setFormatter(logging.Formatter('[%(levelname)s] %(message)s'))
            package_logger.addHandler(handler)
        logger.info(self)

    def __str__(self):
        s = " ===== Config ====="
        s += "\n\tYAML config file: " + self.config_file
        s += "\n\tExperiment directory: " + self.experiment_dir
        s += "\n\tMain LOG file: " + str(self.log_file) + "\n\t"
        return s


class StoreConfig(Config):
    """
    Settings of a genomic sequence store
        base_file_name: prefix of the per-chromosome files, relative to the config file directory
        genome_id: name reported in summaries
        verbose: extra progress messages
    """
    def __init__(self, config_file, **entries):
        self.base_file_name = None
        self.genome_id = None
        self.verbose = False
        self.__dict__.update(entries)
        super().__init__(config_file)
        if self.base_file_name is None:
            raise ValueError("Missing 'base_file_name' in config %s" % config_file)
        if self.genome_id is None:
            self.genome_id = Path(self.base_file_name).name
        self.base_file_name = str(Path(self.experiment_dir) / self.base_file_name)

    def __str__(self):
        s = super().__str__()
        s += '\n\t'.join("{}: {}".format(k, v) for k, v in self.__dict__.items())
        return s


def load_config(fname, config_type):
    """
    Load a YAML configuration file
    """
    with open(fname) as file:
        config = yaml.load(file, Loader=yaml.FullLoader)
    if config_type == CONFIG_TYPE.STORE:
        return StoreConfig(fname, **(config or {}))
    else:
        return None

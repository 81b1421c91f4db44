"""
The uWSGI script for launching the standard data look-up service.

This script launches the service using uwsgi.  For example, one can launch the service with the
following command:

  uwsgi --plugin python3 --http-socket :9090 --wsgi-file stddata-uwsgi.py \
        --set-ph stddata_config_file=stddata_conf.yml

If no configuration file is given, the country and language data sets are served with their
default configurations.

This script also pays attention to the following environment variables:

   STDDATA_CONFIG_FILE   the configuration file (or URL) to use; this is overridden by the
                           stddata_config_file uwsgi variable.
   STDDATA_PYTHONPATH    the directory containing the stddata python package, if it is not
                           installed.
"""
import os, sys, logging

try:
    import stddata
except ImportError:
    if os.environ.get('STDDATA_PYTHONPATH'):
        sys.path.insert(0, os.environ['STDDATA_PYTHONPATH'])
    import stddata

from stddata import config, wsgi

import uwsgi

# determine where the configuration is coming from
confsrc = uwsgi.opt.get("stddata_config_file")
if isinstance(confsrc, (bytes, bytearray)):
    confsrc = confsrc.decode()
if not confsrc:
    confsrc = os.environ.get('STDDATA_CONFIG_FILE')

cfg = {}
if confsrc:
    cfg = config.resolve_configuration(confsrc)

config.configure_log(config=cfg)

application = wsgi.app(cfg)
logging.info("stddata service ready")

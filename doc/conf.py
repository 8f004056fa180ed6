# -*- coding: utf-8 -*-
#
# PMFSim 文档构建配置文件
#
# 当 Sphinx 执行本文件时，当前目录被设置为该文件所在目录。
# 未列出的配置项都使用 Sphinx 的默认值。

import sys, os
import datetime

# 添加 PMFSim 的 python 路径
pwd = os.path.dirname(__file__)
path = os.path.abspath(os.path.join(pwd, ".."))
sys.path.append(path)
version_full = __import__("pmfsim").__version__
version_short = version_full[0:3]

# -- 通用配置 -----------------------------------------------------

extensions = ['sphinx.ext.autodoc', 'sphinx.ext.coverage', 'sphinx.ext.mathjax',
              'sphinx.ext.viewcode', 'sphinx.ext.autosectionlabel']

templates_path = ['_templates']
source_suffix = '.rst'
source_encoding = 'utf-8-sig'
master_doc = 'index'
language = 'zh_CN'

project = u'Plant Modelling Framework Simulator'
author = 'Allard de Wit'
this_year = datetime.date.today().year
copyright = '%s, %s' % (this_year, author)

version = version_full
release = version_short

exclude_patterns = ['_build']
pygments_style = 'sphinx'

# autodoc 按源代码中的顺序列出成员
autodoc_member_order = 'bysource'

# -- HTML 输出选项 ---------------------------------------------------

html_theme = "sphinx_rtd_theme"
htmlhelp_basename = 'PMFSimdoc'

# -- LaTeX 输出选项 --------------------------------------------------

latex_elements = {
    'papersize': 'a4paper',
    'pointsize': '11pt',
}

latex_documents = [
  ('index', 'PMFSim.tex', u'PMFSim Documentation',
   u'Allard de Wit', 'manual'),
]

# -- 手册页输出选项 --------------------------------------------------

man_pages = [
    ('index', 'pmfsim', u'PMFSim Documentation',
     [u'Allard de Wit'], 1)
]
